"""Pydantic schemas for territorial dictionary entries."""
from typing import Optional
from pydantic import BaseModel, Field


class DictionaryEntryCreate(BaseModel):
    """Dictionary entry creation schema.

    ``parent_code`` is required for levels that have a parent and must be
    omitted for regions and streets. Code formats are checked per level.
    """
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    parent_code: Optional[str] = Field(None, min_length=1, max_length=20)


class DictionaryEntryUpdate(BaseModel):
    """Dictionary entry update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    parent_code: Optional[str] = Field(None, min_length=1, max_length=20)


class DictionaryEntryResponse(BaseModel):
    """Dictionary entry response schema."""
    code: str
    name: str
    parent_code: Optional[str] = None


class ParentOption(BaseModel):
    """Code/name pair for cascading selectors."""
    code: str
    name: str


class ImportResult(BaseModel):
    """Outcome of a bulk dictionary import."""
    created: int = 0
    updated: int = 0
