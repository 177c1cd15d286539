"""Internet providers API endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser, get_current_user, require_writer
from building_registry.config import get_settings
from building_registry.database import get_db
from building_registry.schemas.common import PaginatedResponse
from building_registry.schemas.provider import ProviderCreate, ProviderResponse, ProviderUpdate
from building_registry.services.providers import ProviderService

settings = get_settings()

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=PaginatedResponse[ProviderResponse])
async def list_providers(
    search: Optional[str] = Query(None, description="Substring of the provider name"),
    technology: Optional[str] = Query(None),
    page: int = Query(1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List providers ordered by name."""
    return await ProviderService(db).list(
        search=search, technology=technology, page=page, page_size=page_size
    )


@router.post("", response_model=ProviderResponse, status_code=status.HTTP_201_CREATED)
async def create_provider(
    data: ProviderCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    return await ProviderService(db).create(data, current_user)


@router.get("/{provider_id}", response_model=ProviderResponse)
async def get_provider(
    provider_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await ProviderService(db).get(provider_id)


@router.patch("/{provider_id}", response_model=ProviderResponse)
async def update_provider(
    provider_id: int,
    data: ProviderUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    return await ProviderService(db).update(provider_id, data, current_user)


@router.delete("/{provider_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_provider(
    provider_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    """Delete a provider no building refers to."""
    await ProviderService(db).delete(provider_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
