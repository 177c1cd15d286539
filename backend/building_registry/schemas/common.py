"""Shared response envelopes."""
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """List envelope: ``{data, page, pageSize, total}``."""
    model_config = ConfigDict(populate_by_name=True)

    data: List[T]
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
