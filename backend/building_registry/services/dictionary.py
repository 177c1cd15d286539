"""Maintenance of the six territorial dictionary tables."""
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.auth.jwt import CurrentUser
from building_registry.errors import (
    AlreadyExists,
    InvalidInput,
    NotFound,
    ReferenceInUse,
    RegistryError,
    StorageFailure,
    UnknownReference,
)
from building_registry.models import Building
from building_registry.schemas.common import PaginatedResponse
from building_registry.schemas.dictionary import (
    DictionaryEntryCreate,
    DictionaryEntryResponse,
    DictionaryEntryUpdate,
    ImportResult,
    ParentOption,
)
from building_registry.services.pagination import paginate
from building_registry.services.territory import Level, TerritoryValidator, child_level
from building_registry.utils.audit import capture, diff_fields, log_audit_event
from building_registry.utils.db import is_foreign_key_violation, is_unique_violation, storage_guard

logger = logging.getLogger(__name__)


def to_response(level: Level, entry) -> DictionaryEntryResponse:
    parent_column = level.spec.parent_column
    return DictionaryEntryResponse(
        code=entry.code,
        name=entry.name,
        parent_code=getattr(entry, parent_column) if parent_column else None,
    )


class DictionaryService:
    """CRUD over one dictionary level at a time, selected by ``Level``."""

    def __init__(self, db: AsyncSession, validator: Optional[TerritoryValidator] = None):
        self.db = db
        self.validator = validator or TerritoryValidator(db)

    async def list(
        self,
        level: Level,
        parent_code: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> PaginatedResponse[DictionaryEntryResponse]:
        spec = level.spec
        model = spec.model

        conditions = []
        if parent_code and spec.parent_column:
            conditions.append(getattr(model, spec.parent_column) == parent_code)
        if search and search.strip():
            conditions.append(model.name.ilike(f"%{search.strip()}%"))

        with storage_guard("count", level.value):
            total = (
                await self.db.execute(select(func.count()).select_from(model).where(*conditions))
            ).scalar_one()

        window = paginate(page, page_size, total)
        window.ensure_in_range(total)

        query = select(model).where(*conditions).order_by(model.name, model.code)
        with storage_guard("list", level.value):
            entries = (await self.db.execute(window.apply(query))).scalars().all()

        return PaginatedResponse[DictionaryEntryResponse](
            data=[to_response(level, entry) for entry in entries],
            page=page,
            page_size=page_size,
            total=total,
        )

    async def get(self, level: Level, code: str) -> DictionaryEntryResponse:
        return to_response(level, await self._get_entry(level, code))

    async def parent_options(self, level: Level) -> List[ParentOption]:
        """All entries of the parent level, for cascading selectors."""
        parent = level.spec.parent
        if parent is None:
            return []
        model = parent.spec.model
        with storage_guard("list", parent.value):
            entries = (
                await self.db.execute(select(model).order_by(model.name, model.code))
            ).scalars().all()
        return [ParentOption(code=entry.code, name=entry.name) for entry in entries]

    async def create(
        self, level: Level, data: DictionaryEntryCreate, actor: CurrentUser
    ) -> DictionaryEntryResponse:
        self._check_code(level, data.code)
        await self._check_parent(level, data.parent_code)

        with storage_guard("lookup", level.value, data.code):
            existing = await self.db.get(level.spec.model, data.code)
        if existing is not None:
            raise AlreadyExists(level.value, data.code)

        entry = self._build_entry(level, data)
        self.db.add(entry)
        await self._commit("create", level, data.code, entry, parent_code=data.parent_code)

        log_audit_event(
            level.value,
            "created",
            entity_id=entry.code,
            actor=actor,
            details={"name": entry.name, "parent_code": data.parent_code},
        )
        return to_response(level, entry)

    async def update(
        self, level: Level, code: str, data: DictionaryEntryUpdate, actor: CurrentUser
    ) -> DictionaryEntryResponse:
        entry = await self._get_entry(level, code)
        changes = data.model_dump(exclude_unset=True)
        tracked = ["name"] + ([level.spec.parent_column] if level.spec.parent_column else [])
        before = capture(entry, tracked)

        if "name" in changes and changes["name"] is None:
            raise InvalidInput("name", "cannot be null")

        if "parent_code" in changes:
            parent_code = changes["parent_code"]
            if parent_code is None and level.spec.parent is not None:
                raise InvalidInput("parent_code", "cannot be null")
            await self._check_parent(level, parent_code)
            if level.spec.parent_column:
                setattr(entry, level.spec.parent_column, parent_code)

        if "name" in changes:
            entry.name = changes["name"]

        await self._commit("update", level, code, entry, parent_code=changes.get("parent_code"))

        log_audit_event(
            level.value,
            "updated",
            entity_id=code,
            actor=actor,
            changes=diff_fields(before, capture(entry, tracked)),
        )
        return to_response(level, entry)

    async def delete(self, level: Level, code: str, actor: CurrentUser) -> None:
        """Delete an entry that nothing references.

        Usage is checked up front; a foreign-key error from storage is
        reported the same way.
        """
        entry = await self._get_entry(level, code)

        dependents = await self._count_dependents(level, code)
        if dependents:
            raise ReferenceInUse(level.value, code, dependents)

        await self.db.delete(entry)
        await self._commit("delete", level, code)

        log_audit_event(level.value, "deleted", entity_id=code, actor=actor, details={"name": entry.name})

    async def import_entries(
        self, level: Level, rows: Iterable[DictionaryEntryCreate], actor: Optional[CurrentUser] = None
    ) -> ImportResult:
        """Insert or update many entries in one transaction.

        The first invalid row aborts the whole batch.
        """
        result = ImportResult()
        try:
            for row in rows:
                self._check_code(level, row.code)
                await self._check_parent(level, row.parent_code)

                with storage_guard("lookup", level.value, row.code):
                    entry = await self.db.get(level.spec.model, row.code)
                if entry is None:
                    self.db.add(self._build_entry(level, row))
                    result.created += 1
                else:
                    entry.name = row.name
                    if level.spec.parent_column:
                        setattr(entry, level.spec.parent_column, row.parent_code)
                    result.updated += 1
        except RegistryError:
            await self.db.rollback()
            raise

        await self._commit("import", level, None)

        log_audit_event(
            level.value,
            "imported",
            actor=actor,
            details={"created": result.created, "updated": result.updated},
        )
        return result

    async def _get_entry(self, level: Level, code: str):
        with storage_guard("get", level.value, code):
            entry = await self.db.get(level.spec.model, code)
        if entry is None:
            raise NotFound(level.value, code)
        return entry

    @staticmethod
    def _check_code(level: Level, code: str) -> None:
        spec = level.spec
        if not spec.code_pattern.match(code):
            raise InvalidInput("code", f"{level.value} code must be {spec.code_format}")

    async def _check_parent(self, level: Level, parent_code: Optional[str]) -> None:
        if level.spec.parent is None:
            if parent_code:
                raise InvalidInput("parent_code", f"{level.value} has no parent level")
            return
        if not parent_code:
            raise InvalidInput("parent_code", f"required for {level.value}")
        await self.validator.validate_parent(level, parent_code)

    @staticmethod
    def _build_entry(level: Level, data: DictionaryEntryCreate):
        values = {"code": data.code, "name": data.name}
        if level.spec.parent_column:
            values[level.spec.parent_column] = data.parent_code
        return level.spec.model(**values)

    async def _count_dependents(self, level: Level, code: str) -> dict[str, int]:
        counts: dict[str, int] = {}

        child = child_level(level)
        if child is not None:
            child_model = child.spec.model
            with storage_guard("usage_check", level.value, code):
                counts[child.spec.resource] = (
                    await self.db.execute(
                        select(func.count())
                        .select_from(child_model)
                        .where(getattr(child_model, child.spec.parent_column) == code)
                    )
                ).scalar_one()

        with storage_guard("usage_check", level.value, code):
            counts["buildings"] = (
                await self.db.execute(
                    select(func.count(Building.id)).where(
                        getattr(Building, level.code_field) == code
                    )
                )
            ).scalar_one()

        return {name: count for name, count in counts.items() if count}

    async def _commit(
        self,
        operation: str,
        level: Level,
        code: Optional[str],
        entry=None,
        parent_code: Optional[str] = None,
    ) -> None:
        try:
            await self.db.flush()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_unique_violation(exc):
                raise AlreadyExists(level.value, code) from exc
            if is_foreign_key_violation(exc):
                if operation == "delete":
                    raise ReferenceInUse(level.value, code) from exc
                if level.spec.parent is not None and parent_code:
                    raise UnknownReference(level.spec.parent.value, parent_code) from exc
            logger.exception(
                "Integrity error: operation=%s entity=%s id=%s", operation, level.value, code
            )
            raise StorageFailure(operation, level.value, code) from exc

        with storage_guard(operation, level.value, code):
            await self.db.commit()
            if entry is not None:
                await self.db.refresh(entry)
