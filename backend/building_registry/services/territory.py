"""Territorial hierarchy levels and reference validation.

The six dictionary levels form a closed set. ``LEVELS`` maps each one to its
table, URL resource name, code format and parent level, so callers never
address dictionary tables by arbitrary strings.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from building_registry.config import get_settings
from building_registry.errors import HierarchyMismatch, InvalidInput, UnknownReference
from building_registry.models import (
    City,
    CitySubdivision,
    Community,
    District,
    Provider,
    Region,
    Street,
)
from building_registry.utils.db import storage_guard


class Level(str, enum.Enum):
    REGION = "region"
    DISTRICT = "district"
    COMMUNITY = "community"
    CITY = "city"
    CITY_SUBDIVISION = "city_subdivision"
    STREET = "street"

    @property
    def spec(self) -> "LevelSpec":
        return LEVELS[self]

    @property
    def code_field(self) -> str:
        """Column holding this level's code on a building."""
        return f"{self.value}_code"

    @property
    def name_field(self) -> str:
        """Column holding this level's snapshot name on a building."""
        return f"{self.value}_name"

    @classmethod
    def from_resource(cls, resource: str) -> "Level":
        for level, spec in LEVELS.items():
            if spec.resource == resource:
                return level
        raise InvalidInput("resource", f"unknown dictionary resource '{resource}'")


@dataclass(frozen=True)
class LevelSpec:
    model: type
    resource: str
    code_pattern: re.Pattern
    code_format: str
    parent: Optional[Level] = None
    parent_column: Optional[str] = None
    required_on_building: bool = True


LEVELS: dict[Level, LevelSpec] = {
    Level.REGION: LevelSpec(
        model=Region,
        resource="regions",
        code_pattern=re.compile(r"^\d{2}$"),
        code_format="2 digits",
    ),
    Level.DISTRICT: LevelSpec(
        model=District,
        resource="districts",
        code_pattern=re.compile(r"^\d{4}$"),
        code_format="4 digits",
        parent=Level.REGION,
        parent_column="region_code",
    ),
    Level.COMMUNITY: LevelSpec(
        model=Community,
        resource="communities",
        code_pattern=re.compile(r"^\d{7}$"),
        code_format="7 digits",
        parent=Level.DISTRICT,
        parent_column="district_code",
    ),
    Level.CITY: LevelSpec(
        model=City,
        resource="cities",
        code_pattern=re.compile(r"^\d{7}$"),
        code_format="7 digits",
        parent=Level.COMMUNITY,
        parent_column="community_code",
    ),
    Level.CITY_SUBDIVISION: LevelSpec(
        model=CitySubdivision,
        resource="city-subdivisions",
        code_pattern=re.compile(r"^\d{7}$"),
        code_format="7 digits",
        parent=Level.CITY,
        parent_column="city_code",
        required_on_building=False,
    ),
    Level.STREET: LevelSpec(
        model=Street,
        resource="streets",
        code_pattern=re.compile(r"^\S{1,20}$"),
        code_format="1 to 20 non-blank characters",
        required_on_building=False,
    ),
}

# Root first
HIERARCHY: tuple[Level, ...] = tuple(Level)


def child_level(level: Level) -> Optional[Level]:
    """The level whose parent is ``level``, if any."""
    for candidate, spec in LEVELS.items():
        if spec.parent is level:
            return candidate
    return None


def codes_of(source: Any) -> dict[Level, Optional[str]]:
    """Extract ``{level: code}`` from a mapping or object with ``*_code`` fields."""
    if isinstance(source, Mapping):
        return {level: source.get(level.code_field) for level in HIERARCHY}
    return {level: getattr(source, level.code_field, None) for level in HIERARCHY}


@dataclass
class TerritorySnapshot:
    """Names resolved for a set of hierarchy codes at validation time."""
    codes: dict[Level, Optional[str]] = field(default_factory=dict)
    names: dict[Level, Optional[str]] = field(default_factory=dict)

    def as_columns(self) -> dict[str, Optional[str]]:
        """Building columns (codes and names) for every resolved level."""
        columns: dict[str, Optional[str]] = {}
        for level, code in self.codes.items():
            columns[level.code_field] = code
            columns[level.name_field] = self.names.get(level)
        return columns


class TerritoryValidator:
    """Checks that hierarchy codes and provider ids exist and resolves names.

    Codes are validated independently unless ``strict`` is enabled (or the
    ``ENFORCE_TERRITORIAL_CHAIN`` setting is on), in which case each code must
    also declare the supplied code of the level above as its parent.
    """

    def __init__(self, db: AsyncSession, *, strict: Optional[bool] = None):
        self.db = db
        self.strict = get_settings().ENFORCE_TERRITORIAL_CHAIN if strict is None else strict

    async def resolve(self, level: Level, code: str):
        with storage_guard("lookup", level.value, code):
            entry = await self.db.get(level.spec.model, code)
        if entry is None:
            raise UnknownReference(level.value, code)
        return entry

    async def validate_chain(
        self,
        codes: Mapping[Level, Optional[str]],
        *,
        strict: Optional[bool] = None,
    ) -> TerritorySnapshot:
        """Resolve every non-empty code; the first unknown one aborts.

        ``strict`` overrides the validator default for this call only.
        """
        if strict is None:
            strict = self.strict
        snapshot = TerritorySnapshot()
        resolved = {}
        for level in HIERARCHY:
            code = codes.get(level)
            if not code:
                continue
            entry = await self.resolve(level, code)
            resolved[level] = entry
            snapshot.codes[level] = code
            snapshot.names[level] = entry.name

        if strict:
            self._check_links(resolved, codes)
        return snapshot

    async def check_chain(self, codes: Mapping[Level, Optional[str]]) -> None:
        """Verify parent links of a complete set of codes."""
        resolved = {}
        for level in HIERARCHY:
            code = codes.get(level)
            if code:
                resolved[level] = await self.resolve(level, code)
        self._check_links(resolved, codes)

    @staticmethod
    def _check_links(resolved: Mapping[Level, Any], codes: Mapping[Level, Optional[str]]) -> None:
        for level, entry in resolved.items():
            spec = level.spec
            if spec.parent is None:
                continue
            supplied_parent = codes.get(spec.parent)
            if supplied_parent and getattr(entry, spec.parent_column) != supplied_parent:
                raise HierarchyMismatch(level.value, entry.code, spec.parent.value, supplied_parent)

    async def validate_parent(self, level: Level, parent_code: str) -> str:
        """Validate a parent reference one level up and return its name."""
        spec = level.spec
        if spec.parent is None:
            raise InvalidInput("parent_code", f"{level.value} has no parent level")
        parent = await self.resolve(spec.parent, parent_code)
        return parent.name

    async def ensure_provider(self, provider_id: int) -> Provider:
        with storage_guard("lookup", "provider", provider_id):
            provider = await self.db.get(Provider, provider_id)
        if provider is None:
            raise UnknownReference("provider", provider_id)
        return provider
