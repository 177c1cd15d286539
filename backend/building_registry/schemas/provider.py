"""Pydantic schemas for Provider."""
from typing import Optional
from pydantic import BaseModel, Field


class ProviderBase(BaseModel):
    """Base provider schema."""
    name: str = Field(..., min_length=1, max_length=255)
    technology: str = Field(..., min_length=1, max_length=100)
    bandwidth: int = Field(..., gt=0, le=1_000_000, description="Bandwidth in Mbps")


class ProviderCreate(ProviderBase):
    """Provider creation schema."""


class ProviderUpdate(BaseModel):
    """Provider update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    technology: Optional[str] = Field(None, min_length=1, max_length=100)
    bandwidth: Optional[int] = Field(None, gt=0, le=1_000_000)


class ProviderResponse(ProviderBase):
    """Provider response schema."""
    id: int

    class Config:
        from_attributes = True
