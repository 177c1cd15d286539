"""Offset/limit arithmetic shared by every list operation."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select

from building_registry.config import get_settings
from building_registry.errors import InvalidInput, PageOutOfRange


@dataclass(frozen=True)
class PageWindow:
    page: int
    page_size: int
    offset: int
    limit: int
    is_out_of_range: bool

    def apply(self, query: Select) -> Select:
        return query.offset(self.offset).limit(self.limit)

    def ensure_in_range(self, total: int) -> None:
        if self.is_out_of_range:
            raise PageOutOfRange(self.page, total)


def paginate(page: int, page_size: int, total: int, *, max_page_size: Optional[int] = None) -> PageWindow:
    """Compute the slice for ``page`` and whether it lies past the last item.

    Page 1 is never out of range, so an empty result set is a valid empty
    page. Any later page whose offset reaches ``total`` is out of range.
    """
    if max_page_size is None:
        max_page_size = get_settings().MAX_PAGE_SIZE
    if page < 1:
        raise InvalidInput("page", "must be 1 or greater")
    if not 1 <= page_size <= max_page_size:
        raise InvalidInput("pageSize", f"must be between 1 and {max_page_size}")

    offset = (page - 1) * page_size
    return PageWindow(
        page=page,
        page_size=page_size,
        offset=offset,
        limit=page_size,
        is_out_of_range=page > 1 and offset >= total and total > 0,
    )
