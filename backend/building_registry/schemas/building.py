"""Pydantic schemas for Building."""
from datetime import datetime
from typing import Annotated, Literal, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field

from building_registry.utils.geo import latitude_error, longitude_error


def _check_longitude(value: float) -> float:
    reason = longitude_error(value)
    if reason:
        raise ValueError(reason)
    return value


def _check_latitude(value: float) -> float:
    reason = latitude_error(value)
    if reason:
        raise ValueError(reason)
    return value


Longitude = Annotated[float, AfterValidator(_check_longitude)]
Latitude = Annotated[float, AfterValidator(_check_latitude)]


class BuildingCreate(BaseModel):
    """Building creation schema."""
    region_code: str = Field(..., pattern=r"^\d{2}$")
    district_code: str = Field(..., pattern=r"^\d{4}$")
    community_code: str = Field(..., pattern=r"^\d{7}$")
    city_code: str = Field(..., pattern=r"^\d{7}$")
    city_subdivision_code: Optional[str] = Field(None, pattern=r"^\d{7}$")
    street_code: Optional[str] = Field(None, min_length=1, max_length=20)
    building_number: str = Field(..., min_length=1, max_length=20)
    post_code: str = Field(..., pattern=r"^\d{2}-\d{3}$")
    longitude: Longitude
    latitude: Latitude
    provider_id: int = Field(..., gt=0)


class BuildingUpdate(BaseModel):
    """Building partial update schema.

    Only fields present in the request are applied. ``city_subdivision_code``
    and ``street_code`` may be sent as null to clear them.
    """
    region_code: Optional[str] = Field(None, pattern=r"^\d{2}$")
    district_code: Optional[str] = Field(None, pattern=r"^\d{4}$")
    community_code: Optional[str] = Field(None, pattern=r"^\d{7}$")
    city_code: Optional[str] = Field(None, pattern=r"^\d{7}$")
    city_subdivision_code: Optional[str] = Field(None, pattern=r"^\d{7}$")
    street_code: Optional[str] = Field(None, min_length=1, max_length=20)
    building_number: Optional[str] = Field(None, min_length=1, max_length=20)
    post_code: Optional[str] = Field(None, pattern=r"^\d{2}-\d{3}$")
    longitude: Optional[Longitude] = None
    latitude: Optional[Latitude] = None
    provider_id: Optional[int] = Field(None, gt=0)


class BuildingResponse(BaseModel):
    """Building response schema."""
    id: UUID
    region_code: str
    region_name: str
    district_code: str
    district_name: str
    community_code: str
    community_name: str
    city_code: str
    city_name: str
    city_subdivision_code: Optional[str] = None
    city_subdivision_name: Optional[str] = None
    street_code: Optional[str] = None
    street_name: Optional[str] = None
    building_number: str
    post_code: str
    longitude: float
    latitude: float
    provider_id: int
    status: Literal["active", "deleted"]
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID

    class Config:
        from_attributes = True


class BuildingListItem(BuildingResponse):
    """Building row in list responses, with the provider display name."""
    provider_name: str


class BuildingFilters(BaseModel):
    """Filters accepted by the building list."""
    region_code: Optional[str] = None
    district_code: Optional[str] = None
    community_code: Optional[str] = None
    city_code: Optional[str] = None
    city_subdivision_code: Optional[str] = None
    street_code: Optional[str] = None
    provider_id: Optional[int] = None
    status: Optional[Literal["active", "deleted"]] = None
