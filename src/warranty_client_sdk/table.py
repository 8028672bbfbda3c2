from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, TypeVar

from .exceptions import FetchError, RequestCancelledError
from .fetcher import PaginatedQuery, ServerFetcher
from .models import PaginatedResult, SortDirection
from .query_state import PageQueryState, QuerySnapshot
from .ui_errors import UserFacingError, to_user_facing_error
from .views import sort_rows

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


class TableViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    REFRESHING = "refreshing"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class TableViewState:
    status: TableViewStatus
    message: str
    retryable: bool = False

    def render(self) -> dict[str, Any]:
        return {"status": self.status.value, "message": self.message, "retryable": self.retryable}


@dataclass(frozen=True)
class PendingFetch:
    sequence: int
    generation: int
    snapshot: QuerySnapshot


def resolve_table_view_state(*, loading: bool, has_data: bool, is_empty: bool, error: UserFacingError | None) -> TableViewState:
    if loading:
        if has_data:
            return TableViewState(status=TableViewStatus.REFRESHING, message="Refreshing")
        return TableViewState(status=TableViewStatus.LOADING, message="Loading")
    if error is not None:
        return TableViewState(status=TableViewStatus.ERROR, message=error.message, retryable=error.retryable)
    if not has_data:
        return TableViewState(status=TableViewStatus.IDLE, message="Not loaded")
    if is_empty:
        return TableViewState(status=TableViewStatus.EMPTY, message="No records")
    return TableViewState(status=TableViewStatus.SUCCESS, message="Ready")


class PaginatedTable(Generic[RowT]):
    """One server-paginated list view: query state, fetch binding and current page.

    Every fetch is tagged with a sequence number; only the latest one may
    update the table. While a refetch is in flight or after it fails, the
    previous page stays visible. ``close()`` detaches the table so late
    responses are dropped.
    """

    def __init__(
        self,
        fetcher: ServerFetcher,
        query: PaginatedQuery,
        *,
        scope: Mapping[str, Any] | None = None,
        state: PageQueryState | None = None,
        derive: Callable[[RowT], Any] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.query = query
        self.scope = dict(scope or {})
        self.state = state or PageQueryState(page_size=fetcher.transport.config.default_page_size)
        self.derive = derive
        self.result: PaginatedResult | None = None
        self.error: UserFacingError | None = None
        self.loading = False
        self._sequence = 0
        self._applied_sequence = 0
        self._generation = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def begin(self) -> PendingFetch:
        with self._lock:
            if self._closed:
                raise RequestCancelledError(code="REQUEST_CANCELLED", message="Table is closed")
            self._sequence += 1
            self.loading = True
            return PendingFetch(sequence=self._sequence, generation=self._generation, snapshot=self.state.freeze())

    def _is_current(self, pending: PendingFetch) -> bool:
        return not self._closed and pending.generation == self._generation and pending.sequence == self._sequence

    def resolve(self, pending: PendingFetch, result: PaginatedResult) -> bool:
        with self._lock:
            if not self._is_current(pending):
                logger.debug("table_stale_response_discarded", extra={"sequence": pending.sequence})
                return False
            self.result = result
            self.error = None
            self.loading = False
            self._applied_sequence = pending.sequence
            return True

    def reject(self, pending: PendingFetch, exc: FetchError) -> bool:
        with self._lock:
            if not self._is_current(pending):
                logger.debug("table_stale_error_discarded", extra={"sequence": pending.sequence})
                return False
            self.error = to_user_facing_error(exc)
            self.loading = False
            return True

    def _run(self, pending: PendingFetch, *, force: bool) -> bool:
        try:
            result = self.fetcher.fetch(self.query, pending.snapshot, self.scope, use_cache=not force)
        except FetchError as exc:
            logger.warning(
                "table_fetch_failed",
                extra={"root_field": self.query.root_field, "code": exc.code, "sequence": pending.sequence},
            )
            return self.reject(pending, exc)
        return self.resolve(pending, result)

    def load(self, *, force: bool = False) -> bool:
        """Fetch the page for the current state; returns whether it was applied."""
        return self._run(self.begin(), force=force)

    def load_async(self, executor: Executor, *, force: bool = False) -> Future:
        pending = self.begin()
        return executor.submit(self._run, pending, force=force)

    def retry(self) -> bool:
        return self.load(force=True)

    def refresh(self) -> bool:
        self.fetcher.cache.invalidate((self.query.cache_name,))
        return self.load(force=True)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._generation += 1
            self.loading = False

    def search(self, term: str | None) -> bool:
        self.state.set_search(term)
        return self.load()

    def filter(self, key: str, value: Any) -> bool:
        self.state.set_filter(key, value)
        return self.load()

    def clear_filter(self, key: str) -> bool:
        self.state.clear_filter(key)
        return self.load()

    def page_to(self, page_index: int) -> bool:
        self.state.set_page_index(page_index)
        return self.load()

    def next_page(self) -> bool:
        self.state.next_page(self.total)
        return self.load()

    def prev_page(self) -> bool:
        self.state.prev_page()
        return self.load()

    def resize(self, page_size: int) -> bool:
        self.state.set_page_size(page_size)
        return self.load()

    def sort_by(self, column: str, direction: SortDirection | str | None) -> bool:
        self.state.set_sort(column, direction)
        return self.load()

    @property
    def rows(self) -> list[RowT]:
        if self.result is None:
            return []
        if not self.state.sort:
            return list(self.result.data)
        return sort_rows(self.result.data, self.state.sort)

    def view_rows(self) -> list[Any]:
        if self.derive is None:
            return self.rows
        return [self.derive(row) for row in self.rows]

    @property
    def total(self) -> int:
        return self.result.total if self.result is not None else 0

    @property
    def page_count(self) -> int:
        return self.state.page_count(self.total)

    def view_state(self) -> TableViewState:
        return resolve_table_view_state(
            loading=self.loading,
            has_data=self.result is not None,
            is_empty=self.result is not None and not self.result.data,
            error=self.error,
        )
