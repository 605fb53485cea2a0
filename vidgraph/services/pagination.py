"""Page arithmetic shared by every list view."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from vidgraph.errors import InvalidArgument


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 10

    def __post_init__(self):
        if not isinstance(self.page, int) or self.page < 1:
            raise InvalidArgument("page must be an integer >= 1")
        if not isinstance(self.limit, int) or self.limit < 1:
            raise InvalidArgument("limit must be an integer >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    """One page of a denormalized view."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    total_items: int = 0
    current_page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.limit) if self.total_items else 0

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "totalItems": self.total_items,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
        }
