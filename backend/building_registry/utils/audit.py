"""Audit trail for registry writes.

Every create, update, delete and import emits one JSON line on the
``building_registry.audit`` logger:

    {"ts": ..., "event": "building_updated", "entity": "building",
     "entity_id": "...", "actor_id": "...", "actor_role": "WRITE",
     "changes": {"street_code": {"from": null, "to": "10843"}}}

``changes`` lists only the fields whose value actually moved, so a rename
of a dictionary entry and the snapshot names it leaves untouched on
buildings can be told apart in the log.
"""

from __future__ import annotations

import enum
import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

audit_logger = logging.getLogger("building_registry.audit")


def _to_serializable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_serializable(v) for v in value]
    return str(value)


def capture(obj: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Current values of ``fields`` on an ORM row, for a later ``diff_fields``."""
    return {field: getattr(obj, field) for field in fields}


def diff_fields(before: Mapping[str, Any], after: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """``{field: {"from": old, "to": new}}`` for every field that changed."""
    return {
        field: {"from": before.get(field), "to": value}
        for field, value in after.items()
        if before.get(field) != value
    }


def log_audit_event(
    entity: str,
    action: str,
    *,
    entity_id: Any = None,
    actor: Any = None,
    changes: Mapping[str, Any] | None = None,
    details: Mapping[str, Any] | None = None,
) -> None:
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": f"{entity}_{action}",
        "entity": entity,
        "entity_id": None if entity_id is None else str(entity_id),
    }

    if actor is not None:
        actor_id = getattr(actor, "id", None)
        payload.update(
            {
                "actor_id": str(actor_id) if actor_id else None,
                "actor_role": _to_serializable(getattr(actor, "role", None)),
            }
        )

    if changes is not None:
        payload["changes"] = _to_serializable(changes)

    if details:
        payload["details"] = _to_serializable(details)

    audit_logger.info(json.dumps(payload, ensure_ascii=False))
