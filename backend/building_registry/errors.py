"""Domain error taxonomy.

Services raise these; ``building_registry.main`` maps them onto HTTP
responses using ``status_code`` and ``to_detail()``.
"""
from __future__ import annotations

from typing import Any


class RegistryError(Exception):
    """Base class for every error a registry operation can report."""

    error_code = "REGISTRY_ERROR"
    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"error_code": self.error_code, "message": self.message}
        detail.update({k: v for k, v in self.context.items() if v is not None})
        return detail


class InvalidInput(RegistryError):
    error_code = "INVALID_INPUT"
    status_code = 400

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}", field=field, reason=reason)
        self.field = field
        self.reason = reason


class UnknownReference(RegistryError):
    """A hierarchy code or provider id that does not exist."""

    error_code = "UNKNOWN_REFERENCE"
    status_code = 404

    def __init__(self, level: str, code: Any, message: str | None = None, **context: Any):
        super().__init__(
            message or f"Invalid {level}: {code} does not exist",
            level=level,
            code=str(code),
            **context,
        )
        self.level = level
        self.code = code


class HierarchyMismatch(UnknownReference):
    """A code exists but belongs to a different parent than the one supplied."""

    error_code = "HIERARCHY_MISMATCH"

    def __init__(self, level: str, code: str, parent_level: str, parent_code: str):
        super().__init__(
            level,
            code,
            message=f"{level} {code} does not belong to {parent_level} {parent_code}",
            parent_level=parent_level,
            parent_code=parent_code,
        )
        self.parent_level = parent_level
        self.parent_code = parent_code


class DuplicateBuilding(RegistryError):
    error_code = "DUPLICATE_BUILDING"
    status_code = 409

    def __init__(self, key: dict[str, Any] | None = None):
        super().__init__("Building already exists at this address", key=key)
        self.key = key


class AlreadyExists(RegistryError):
    error_code = "ALREADY_EXISTS"
    status_code = 409

    def __init__(self, level: str, code: Any):
        super().__init__(f"{level} {code} already exists", level=level, code=str(code))
        self.level = level
        self.code = code


class NotFound(RegistryError):
    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, id: Any):
        super().__init__(f"{entity} {id} not found", entity=entity, id=str(id))
        self.entity = entity
        self.id = id


class PageOutOfRange(RegistryError):
    error_code = "PAGE_OUT_OF_RANGE"
    status_code = 404

    def __init__(self, page: int, total: int):
        super().__init__("Requested page is out of range", page=page, total=total)
        self.page = page
        self.total = total


class Forbidden(RegistryError):
    error_code = "FORBIDDEN"
    status_code = 403

    def __init__(self, required: list[str]):
        super().__init__(
            f"Requires one of roles: {', '.join(required)}", required=list(required)
        )
        self.required = list(required)


class ReferenceInUse(RegistryError):
    """Deletion refused because other records still point at the entity."""

    error_code = "REFERENCE_IN_USE"
    status_code = 409

    def __init__(self, entity: str, id: Any, dependents: dict[str, int] | None = None):
        super().__init__(
            f"Cannot delete {entity} {id}: it is still referenced",
            entity=entity,
            id=str(id),
            dependents=dependents,
        )
        self.entity = entity
        self.id = id
        self.dependents = dependents or {}


class StorageFailure(RegistryError):
    """Opaque persistence error; context is logged, never sent to callers."""

    error_code = "STORAGE_FAILURE"
    status_code = 500

    def __init__(self, operation: str, entity: str, id: Any = None):
        super().__init__("Internal storage error")
        self.operation = operation
        self.entity = entity
        self.id = id

    def to_detail(self) -> dict[str, Any]:
        return {"error_code": self.error_code, "message": self.message}
