"""Buildings API endpoints."""
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser, get_current_user, require_writer
from building_registry.config import get_settings
from building_registry.database import get_db
from building_registry.schemas.building import (
    BuildingCreate,
    BuildingFilters,
    BuildingListItem,
    BuildingResponse,
    BuildingUpdate,
)
from building_registry.schemas.common import PaginatedResponse
from building_registry.services.buildings import BuildingRegistry

settings = get_settings()

router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("", response_model=PaginatedResponse[BuildingListItem])
async def list_buildings(
    region_code: Optional[str] = Query(None),
    district_code: Optional[str] = Query(None),
    community_code: Optional[str] = Query(None),
    city_code: Optional[str] = Query(None),
    city_subdivision_code: Optional[str] = Query(None),
    street_code: Optional[str] = Query(None),
    provider_id: Optional[int] = Query(None),
    building_status: Optional[Literal["active", "deleted"]] = Query(None, alias="status"),
    page: int = Query(1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List buildings, newest first.

    Every filter code and provider id must exist; an unknown one is reported
    instead of returning an empty page.
    """
    filters = BuildingFilters(
        region_code=region_code,
        district_code=district_code,
        community_code=community_code,
        city_code=city_code,
        city_subdivision_code=city_subdivision_code,
        street_code=street_code,
        provider_id=provider_id,
        status=building_status,
    )
    return await BuildingRegistry(db).list(filters, page=page, page_size=page_size)


@router.post("", response_model=BuildingResponse, status_code=status.HTTP_201_CREATED)
async def create_building(
    data: BuildingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    """Register a building at a validated address."""
    return await BuildingRegistry(db).create(data, current_user)


@router.get("/{building_id}", response_model=BuildingResponse)
async def get_building(
    building_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get a specific building."""
    return await BuildingRegistry(db).get(building_id)


@router.patch("/{building_id}", response_model=BuildingResponse)
async def update_building(
    building_id: UUID,
    data: BuildingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    """Partially update a building; only fields sent are changed."""
    return await BuildingRegistry(db).update(building_id, data, current_user)
