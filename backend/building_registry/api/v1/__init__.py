"""API v1 router aggregation."""
from fastapi import APIRouter

from building_registry.api.v1.buildings import router as buildings_router
from building_registry.api.v1.dictionary import router as dictionary_router
from building_registry.api.v1.providers import router as providers_router

router = APIRouter()

router.include_router(buildings_router)
router.include_router(providers_router)
router.include_router(dictionary_router)
