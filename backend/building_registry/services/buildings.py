"""Building registry: validated writes, snapshot names, address uniqueness."""
import logging
from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser
from building_registry.errors import DuplicateBuilding, InvalidInput, NotFound, StorageFailure
from building_registry.models import ACTIVE_ADDRESS_INDEX, Building, BuildingStatus, Provider
from building_registry.models.building import utcnow
from building_registry.schemas.building import (
    BuildingCreate,
    BuildingFilters,
    BuildingListItem,
    BuildingResponse,
    BuildingUpdate,
)
from building_registry.schemas.common import PaginatedResponse
from building_registry.services.pagination import paginate
from building_registry.services.territory import HIERARCHY, TerritoryValidator, codes_of
from building_registry.utils.audit import capture, diff_fields, log_audit_event
from building_registry.utils.db import is_unique_violation, storage_guard

logger = logging.getLogger(__name__)

UNKNOWN_PROVIDER = "Unknown provider"

# Fields that make up the logical address of a building
KEY_FIELDS = tuple(level.code_field for level in HIERARCHY) + ("building_number",)

# Update fields that may be cleared by sending null
NULLABLE_FIELDS = {"city_subdivision_code", "street_code"}

DETAIL_FIELDS = ("building_number", "post_code", "longitude", "latitude", "provider_id")


class BuildingRegistry:
    """Create, update, fetch and list buildings."""

    def __init__(self, db: AsyncSession, validator: Optional[TerritoryValidator] = None):
        self.db = db
        self.validator = validator or TerritoryValidator(db)

    async def get(self, building_id: UUID) -> Building:
        with storage_guard("get", "building", building_id):
            building = await self.db.get(Building, building_id)
        if building is None:
            raise NotFound("building", building_id)
        return building

    async def create(self, data: BuildingCreate, actor: CurrentUser) -> Building:
        values = data.model_dump()

        snapshot = await self.validator.validate_chain(codes_of(values))
        await self.validator.ensure_provider(data.provider_id)

        key = _address_key(values)
        await self._ensure_unique(key)

        building = Building(
            **snapshot.as_columns(),
            building_number=data.building_number,
            post_code=data.post_code,
            longitude=data.longitude,
            latitude=data.latitude,
            provider_id=data.provider_id,
            status=BuildingStatus.ACTIVE.value,
            created_by=actor.id,
            updated_by=actor.id,
        )
        self.db.add(building)
        await self._commit("create", building, key)

        log_audit_event("building", "created", entity_id=building.id, actor=actor, details=key)
        return building

    async def update(self, building_id: UUID, data: BuildingUpdate, actor: CurrentUser) -> Building:
        building = await self.get(building_id)
        changes = data.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise InvalidInput(field, "cannot be null")

        tracked = list(changes) + [
            level.name_field for level in HIERARCHY if level.code_field in changes
        ]
        before = capture(building, tracked)

        # Only codes that actually change are looked up again
        changed_codes = {
            level: changes[level.code_field]
            for level in HIERARCHY
            if changes.get(level.code_field)
            and changes[level.code_field] != getattr(building, level.code_field)
        }
        snapshot = await self.validator.validate_chain(changed_codes, strict=False)

        key_touched = any(field in changes for field in KEY_FIELDS)
        merged_key = {
            field: changes[field] if field in changes else getattr(building, field)
            for field in KEY_FIELDS
        }
        if self.validator.strict and changed_codes:
            await self.validator.check_chain(codes_of(merged_key))

        if "provider_id" in changes and changes["provider_id"] != building.provider_id:
            await self.validator.ensure_provider(changes["provider_id"])

        if key_touched and building.status == BuildingStatus.ACTIVE.value:
            await self._ensure_unique(merged_key, exclude_id=building.id)

        for level in HIERARCHY:
            if level.code_field not in changes:
                continue
            if changes[level.code_field] is None:
                setattr(building, level.code_field, None)
                setattr(building, level.name_field, None)
            elif level in snapshot.codes:
                setattr(building, level.code_field, snapshot.codes[level])
                setattr(building, level.name_field, snapshot.names[level])

        for field in DETAIL_FIELDS:
            if field in changes:
                setattr(building, field, changes[field])

        building.updated_by = actor.id
        building.updated_at = utcnow()
        await self._commit("update", building, merged_key)

        log_audit_event(
            "building",
            "updated",
            entity_id=building.id,
            actor=actor,
            changes=diff_fields(before, capture(building, tracked)),
        )
        return building

    async def list(
        self,
        filters: BuildingFilters,
        page: int = 1,
        page_size: int = 10,
    ) -> PaginatedResponse[BuildingListItem]:
        """Filtered, paginated list; every filter reference must exist."""
        await self.validator.validate_chain(codes_of(filters), strict=False)
        if filters.provider_id is not None:
            await self.validator.ensure_provider(filters.provider_id)

        conditions = []
        for level in HIERARCHY:
            code = getattr(filters, level.code_field)
            if code:
                conditions.append(getattr(Building, level.code_field) == code)
        if filters.provider_id is not None:
            conditions.append(Building.provider_id == filters.provider_id)
        if filters.status:
            conditions.append(Building.status == filters.status)

        with storage_guard("count", "building"):
            total = (
                await self.db.execute(select(func.count(Building.id)).where(*conditions))
            ).scalar_one()

        window = paginate(page, page_size, total)
        window.ensure_in_range(total)

        query = (
            select(Building, Provider.name)
            .outerjoin(Provider, Provider.id == Building.provider_id)
            .where(*conditions)
            .order_by(Building.created_at.desc(), Building.id)
        )
        with storage_guard("list", "building"):
            rows = (await self.db.execute(window.apply(query))).all()

        items = [
            BuildingListItem(
                **BuildingResponse.model_validate(building).model_dump(),
                provider_name=provider_name or UNKNOWN_PROVIDER,
            )
            for building, provider_name in rows
        ]
        return PaginatedResponse[BuildingListItem](
            data=items, page=page, page_size=page_size, total=total
        )

    async def _ensure_unique(self, key: Mapping[str, Any], exclude_id: Optional[UUID] = None) -> None:
        """Reject the key if an active building already holds it.

        Missing optional codes match other missing codes (IS NULL).
        """
        query = select(Building.id).where(Building.status == BuildingStatus.ACTIVE.value)
        for field in KEY_FIELDS:
            column = getattr(Building, field)
            value = key.get(field)
            query = query.where(column.is_(None) if value is None else column == value)
        if exclude_id is not None:
            query = query.where(Building.id != exclude_id)

        with storage_guard("duplicate_check", "building", exclude_id):
            duplicate = (await self.db.execute(query.limit(1))).scalar_one_or_none()
        if duplicate is not None:
            raise DuplicateBuilding(dict(key))

    async def _commit(self, operation: str, building: Building, key: Mapping[str, Any]) -> None:
        """Flush and commit; the unique index settles concurrent writers."""
        building_id = building.id
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_unique_violation(exc, ACTIVE_ADDRESS_INDEX):
                raise DuplicateBuilding(dict(key)) from exc
            logger.exception(
                "Integrity error: operation=%s entity=building id=%s", operation, building_id
            )
            raise StorageFailure(operation, "building", building_id) from exc

        with storage_guard(operation, "building", building_id):
            await self.db.commit()
            await self.db.refresh(building)


def _address_key(values: Mapping[str, Any]) -> dict[str, Any]:
    return {field: values.get(field) or None for field in KEY_FIELDS}
