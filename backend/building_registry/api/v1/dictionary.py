"""TERYT dictionary API endpoints.

One set of routes serves all six levels; ``resource`` selects the table
(regions, districts, communities, cities, city-subdivisions, streets).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser, get_current_user, require_admin, require_writer
from building_registry.config import get_settings
from building_registry.database import get_db
from building_registry.schemas.common import PaginatedResponse
from building_registry.schemas.dictionary import (
    DictionaryEntryCreate,
    DictionaryEntryResponse,
    DictionaryEntryUpdate,
    ParentOption,
)
from building_registry.services.dictionary import DictionaryService
from building_registry.services.territory import Level

settings = get_settings()

router = APIRouter(prefix="/teryt", tags=["teryt"])


def get_level(resource: str) -> Level:
    return Level.from_resource(resource)


@router.get("/{resource}", response_model=PaginatedResponse[DictionaryEntryResponse])
async def list_entries(
    level: Level = Depends(get_level),
    parent_code: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Substring of the entry name"),
    page: int = Query(1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List entries of one level ordered by name."""
    return await DictionaryService(db).list(
        level, parent_code=parent_code, search=search, page=page, page_size=page_size
    )


@router.get("/{resource}/parent-options", response_model=List[ParentOption])
async def list_parent_options(
    level: Level = Depends(get_level),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Entries of the level above, for cascading selectors."""
    return await DictionaryService(db).parent_options(level)


@router.post("/{resource}", response_model=DictionaryEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    data: DictionaryEntryCreate,
    level: Level = Depends(get_level),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    return await DictionaryService(db).create(level, data, current_user)


@router.get("/{resource}/{code}", response_model=DictionaryEntryResponse)
async def get_entry(
    code: str,
    level: Level = Depends(get_level),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await DictionaryService(db).get(level, code)


@router.patch("/{resource}/{code}", response_model=DictionaryEntryResponse)
async def update_entry(
    code: str,
    data: DictionaryEntryUpdate,
    level: Level = Depends(get_level),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_writer),
):
    """Rename or re-parent an entry.

    Buildings keep the names they were saved with.
    """
    return await DictionaryService(db).update(level, code, data, current_user)


@router.delete("/{resource}/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    code: str,
    level: Level = Depends(get_level),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Delete an entry with no children and no buildings."""
    await DictionaryService(db).delete(level, code, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
