"""Services exports."""
from building_registry.services.buildings import BuildingRegistry
from building_registry.services.dictionary import DictionaryService
from building_registry.services.pagination import PageWindow, paginate
from building_registry.services.providers import ProviderService
from building_registry.services.territory import Level, TerritorySnapshot, TerritoryValidator

__all__ = [
    "BuildingRegistry",
    "DictionaryService",
    "ProviderService",
    "PageWindow",
    "paginate",
    "Level",
    "TerritorySnapshot",
    "TerritoryValidator",
]
