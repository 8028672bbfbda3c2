from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any

from .models import SortDirection


@dataclass(frozen=True)
class QuerySnapshot:
    page_index: int
    page_size: int
    sort: tuple[tuple[str, SortDirection], ...]
    search_term: str
    column_filters: tuple[tuple[str, Any], ...]

    @property
    def skip(self) -> int:
        return self.page_index * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def filters(self) -> dict[str, Any]:
        return dict(self.column_filters)

    def cache_key(self) -> str:
        return json.dumps(
            {
                "page_index": self.page_index,
                "page_size": self.page_size,
                "sort": [[column, direction.value] for column, direction in self.sort],
                "search": self.search_term,
                "filters": dict(self.column_filters),
            },
            sort_keys=True,
            default=str,
        )


@dataclass
class PageQueryState:
    """Page index, page size, sort, search and column filters of one list view.

    Narrowing the result set (search, filters, page size, sort) always sends the
    view back to the first page so the index never points past the new total.
    """

    page_size: int = 10
    page_index: int = 0
    sort: tuple[tuple[str, SortDirection], ...] = ()
    search_term: str = ""
    column_filters: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}")

    @property
    def skip(self) -> int:
        return self.page_index * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def page_count(self, total: int) -> int:
        return math.ceil(max(total, 0) / self.page_size)

    def set_page_index(self, page_index: int) -> None:
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")
        self.page_index = page_index

    def set_search(self, term: str | None) -> None:
        self.search_term = (term or "").strip()
        self.page_index = 0

    def set_filter(self, key: str, value: Any) -> None:
        self.column_filters[key] = value
        self.page_index = 0

    def clear_filter(self, key: str) -> None:
        self.column_filters.pop(key, None)
        self.page_index = 0

    def set_page_size(self, page_size: int) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.page_index = 0

    def set_sort(self, column: str, direction: SortDirection | str | None) -> None:
        if direction is None:
            self.sort = tuple((key, value) for key, value in self.sort if key != column)
        else:
            resolved = SortDirection(direction)
            if any(key == column for key, _ in self.sort):
                self.sort = tuple((key, resolved if key == column else value) for key, value in self.sort)
            else:
                self.sort = (*self.sort, (column, resolved))
        self.page_index = 0

    def next_page(self, total: int) -> None:
        last = max(self.page_count(total) - 1, 0)
        self.set_page_index(min(self.page_index + 1, last))

    def prev_page(self) -> None:
        self.set_page_index(max(self.page_index - 1, 0))

    def first_page(self) -> None:
        self.set_page_index(0)

    def last_page(self, total: int) -> None:
        self.set_page_index(max(self.page_count(total) - 1, 0))

    def freeze(self) -> QuerySnapshot:
        return QuerySnapshot(
            page_index=self.page_index,
            page_size=self.page_size,
            sort=tuple(self.sort),
            search_term=self.search_term,
            column_filters=tuple(sorted(self.column_filters.items(), key=lambda item: item[0])),
        )

    def cache_key(self) -> str:
        return self.freeze().cache_key()
