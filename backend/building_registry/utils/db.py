"""Database error helpers shared by the services."""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from building_registry.errors import StorageFailure

logger = logging.getLogger(__name__)

# SQLSTATE codes (PostgreSQL)
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


@contextmanager
def storage_guard(operation: str, entity: str, id: Any = None) -> Iterator[None]:
    """Turn unexpected database errors into ``StorageFailure``.

    Usage:
        with storage_guard("update", "building", building_id):
            await db.flush()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage failure: operation=%s entity=%s id=%s", operation, entity, id)
        raise StorageFailure(operation, entity, id) from exc


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return code
    # asyncpg errors are wrapped by the SQLAlchemy adapter
    cause = getattr(orig, "__cause__", None)
    return getattr(cause, "sqlstate", None)


def _constraint_name(exc: IntegrityError) -> Optional[str]:
    orig = exc.orig
    name = getattr(orig, "constraint_name", None)
    if name is None:
        name = getattr(getattr(orig, "__cause__", None), "constraint_name", None)
    return name


def is_unique_violation(exc: IntegrityError, constraint: Optional[str] = None) -> bool:
    """True if the error is a unique violation (optionally of ``constraint``)."""
    message = str(exc.orig)
    code = _sqlstate(exc)
    if code is not None and code != UNIQUE_VIOLATION:
        return False
    if code is None and "UNIQUE constraint failed" not in message:
        return False
    if constraint is None:
        return True
    return constraint in message or _constraint_name(exc) == constraint


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    code = _sqlstate(exc)
    if code is not None:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY constraint failed" in str(exc.orig)
