"""Internet provider maintenance."""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser
from building_registry.errors import (
    AlreadyExists,
    InvalidInput,
    NotFound,
    ReferenceInUse,
    StorageFailure,
)
from building_registry.models import Building, Provider
from building_registry.schemas.common import PaginatedResponse
from building_registry.schemas.provider import ProviderCreate, ProviderResponse, ProviderUpdate
from building_registry.services.pagination import paginate
from building_registry.utils.audit import capture, diff_fields, log_audit_event
from building_registry.utils.db import is_foreign_key_violation, is_unique_violation, storage_guard

logger = logging.getLogger(__name__)


class ProviderService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        search: Optional[str] = None,
        technology: Optional[str] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> PaginatedResponse[ProviderResponse]:
        conditions = []
        if search and search.strip():
            conditions.append(Provider.name.ilike(f"%{search.strip()}%"))
        if technology and technology.strip():
            conditions.append(Provider.technology.ilike(f"%{technology.strip()}%"))

        with storage_guard("count", "provider"):
            total = (
                await self.db.execute(select(func.count(Provider.id)).where(*conditions))
            ).scalar_one()

        window = paginate(page, page_size, total)
        window.ensure_in_range(total)

        query = select(Provider).where(*conditions).order_by(Provider.name, Provider.id)
        with storage_guard("list", "provider"):
            providers = (await self.db.execute(window.apply(query))).scalars().all()

        return PaginatedResponse[ProviderResponse](
            data=[ProviderResponse.model_validate(p) for p in providers],
            page=page,
            page_size=page_size,
            total=total,
        )

    async def get(self, provider_id: int) -> Provider:
        with storage_guard("get", "provider", provider_id):
            provider = await self.db.get(Provider, provider_id)
        if provider is None:
            raise NotFound("provider", provider_id)
        return provider

    async def create(self, data: ProviderCreate, actor: CurrentUser) -> Provider:
        await self._ensure_name_free(data.name)

        provider = Provider(**data.model_dump())
        self.db.add(provider)
        await self._commit("create", provider, data.name)

        log_audit_event(
            "provider", "created", entity_id=provider.id, actor=actor, details=data.model_dump()
        )
        return provider

    async def update(self, provider_id: int, data: ProviderUpdate, actor: CurrentUser) -> Provider:
        provider = await self.get(provider_id)
        changes = data.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if value is None:
                raise InvalidInput(field, "cannot be null")

        before = capture(provider, changes)

        if "name" in changes and changes["name"] != provider.name:
            await self._ensure_name_free(changes["name"], exclude_id=provider.id)

        for field, value in changes.items():
            setattr(provider, field, value)

        await self._commit("update", provider, provider.name)

        log_audit_event(
            "provider",
            "updated",
            entity_id=provider.id,
            actor=actor,
            changes=diff_fields(before, capture(provider, changes)),
        )
        return provider

    async def delete(self, provider_id: int, actor: CurrentUser) -> None:
        provider = await self.get(provider_id)

        with storage_guard("usage_check", "provider", provider_id):
            in_use = (
                await self.db.execute(
                    select(func.count(Building.id)).where(Building.provider_id == provider_id)
                )
            ).scalar_one()
        if in_use:
            raise ReferenceInUse("provider", provider_id, {"buildings": in_use})

        name = provider.name
        await self.db.delete(provider)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_foreign_key_violation(exc):
                raise ReferenceInUse("provider", provider_id) from exc
            logger.exception("Integrity error: operation=delete entity=provider id=%s", provider_id)
            raise StorageFailure("delete", "provider", provider_id) from exc

        with storage_guard("delete", "provider", provider_id):
            await self.db.commit()

        log_audit_event("provider", "deleted", entity_id=provider_id, actor=actor, details={"name": name})

    async def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = select(Provider.id).where(Provider.name == name)
        if exclude_id is not None:
            query = query.where(Provider.id != exclude_id)
        with storage_guard("duplicate_check", "provider", exclude_id):
            existing = (await self.db.execute(query.limit(1))).scalar_one_or_none()
        if existing is not None:
            raise AlreadyExists("provider", name)

    async def _commit(self, operation: str, provider: Provider, name: str) -> None:
        provider_id = provider.id
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_unique_violation(exc):
                raise AlreadyExists("provider", name) from exc
            logger.exception(
                "Integrity error: operation=%s entity=provider id=%s", operation, provider_id
            )
            raise StorageFailure(operation, "provider", provider_id) from exc

        with storage_guard(operation, "provider", provider_id):
            await self.db.commit()
            await self.db.refresh(provider)
