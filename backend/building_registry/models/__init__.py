"""Model exports."""
from building_registry.models.dictionary import (
    City,
    CitySubdivision,
    Community,
    District,
    Region,
    Street,
)
from building_registry.models.provider import Provider
from building_registry.models.building import (
    ACTIVE_ADDRESS_INDEX,
    Building,
    BuildingStatus,
)

__all__ = [
    "Region",
    "District",
    "Community",
    "City",
    "CitySubdivision",
    "Street",
    "Provider",
    "Building",
    "BuildingStatus",
    "ACTIVE_ADDRESS_INDEX",
]
