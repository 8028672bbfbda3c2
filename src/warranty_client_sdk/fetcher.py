from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .cache import CacheKey, ResponseCache
from .error_mapper import map_envelope_error
from .exceptions import MalformedResponseError
from .models import PaginatedResult, SearchPaginationInput
from .query_state import QuerySnapshot
from .transport import GraphQLTransport

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


def _row_id(row: Any) -> Any:
    return getattr(row, "id", None)


@dataclass(frozen=True)
class PaginatedQuery(Generic[RowT]):
    """A paginated GraphQL document and how to read its rows."""

    cache_name: str
    root_field: str
    document: str
    row_model: type[RowT]
    identity: Callable[[RowT], Any] = field(default=_row_id)


def build_variables(snapshot: QuerySnapshot, scope: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Map a query snapshot plus fixed scope to the two sibling input objects.

    Scope keys win over column filters on the same key.
    """
    pagination = SearchPaginationInput(
        skip=snapshot.skip,
        take=snapshot.take,
        search=snapshot.search_term or None,
    )
    where = {**snapshot.filters(), **dict(scope or {})}
    return {
        "searchPaginationInput": pagination.model_dump(exclude_none=True),
        "whereSearchInput": where,
    }


def _scope_key(scope: Mapping[str, Any] | None) -> str:
    return json.dumps(dict(scope or {}), sort_keys=True, default=str)


class ServerFetcher:
    """Runs paginated queries through a shared cache with in-flight deduplication."""

    def __init__(self, transport: GraphQLTransport, cache: ResponseCache | None = None) -> None:
        self.transport = transport
        self.cache = cache if cache is not None else ResponseCache(ttl_seconds=transport.config.cache_ttl_seconds)
        self._inflight: dict[CacheKey, Future] = {}
        self._lock = threading.Lock()

    def cache_key(self, query: PaginatedQuery, snapshot: QuerySnapshot, scope: Mapping[str, Any] | None) -> CacheKey:
        return (query.cache_name, query.root_field, _scope_key(scope), snapshot.cache_key())

    def fetch(
        self,
        query: PaginatedQuery[RowT],
        snapshot: QuerySnapshot,
        scope: Mapping[str, Any] | None = None,
        *,
        use_cache: bool = True,
    ) -> PaginatedResult[RowT]:
        key = self.cache_key(query, snapshot, scope)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("paginated_fetch_cache_hit", extra={"root_field": query.root_field})
                return cached

        with self._lock:
            pending = self._inflight.get(key) if use_cache else None
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending
        if not owner:
            return pending.result()

        try:
            result = self._fetch_remote(query, snapshot, scope)
        except BaseException as exc:
            pending.set_exception(exc)
            raise
        else:
            with self._lock:
                # a forced refetch that replaced this request owns the cache entry
                if self._inflight.get(key) is pending:
                    self.cache.set(key, result)
            pending.set_result(result)
            return result
        finally:
            with self._lock:
                if self._inflight.get(key) is pending:
                    del self._inflight[key]

    def _fetch_remote(
        self,
        query: PaginatedQuery[RowT],
        snapshot: QuerySnapshot,
        scope: Mapping[str, Any] | None,
    ) -> PaginatedResult[RowT]:
        variables = build_variables(snapshot, scope)
        envelope = self.transport.call(query.document, variables, operation=query.root_field)
        if not envelope.status:
            logger.warning(
                "paginated_fetch_failed",
                extra={"root_field": query.root_field, "code": envelope.code, "reason": envelope.message},
            )
            raise map_envelope_error(envelope)
        return parse_paginated(query, envelope.data, snapshot)


def parse_paginated(
    query: PaginatedQuery[RowT],
    data: Mapping[str, Any],
    snapshot: QuerySnapshot,
) -> PaginatedResult[RowT]:
    if query.root_field not in data or data[query.root_field] is None:
        raise MalformedResponseError(
            code="MALFORMED_RESPONSE",
            message="Value not found in response",
            details={"root_field": query.root_field},
            raw_payload=dict(data),
        )
    raw = data[query.root_field]
    try:
        result = PaginatedResult[query.row_model].model_validate(raw)
    except PydanticValidationError as exc:
        raise MalformedResponseError(
            code="MALFORMED_RESPONSE",
            message=f"Invalid {query.root_field} payload",
            details=exc.errors(include_url=False),
            raw_payload=raw,
        ) from exc

    if result.skip != snapshot.skip or result.take != snapshot.take:
        raise MalformedResponseError(
            code="MALFORMED_RESPONSE",
            message=(
                f"{query.root_field} echoed skip={result.skip} take={result.take}, "
                f"requested skip={snapshot.skip} take={snapshot.take}"
            ),
            raw_payload=raw,
        )

    seen: set[Any] = set()
    for row in result.data:
        identity = query.identity(row)
        if identity is None:
            continue
        if identity in seen:
            raise MalformedResponseError(
                code="MALFORMED_RESPONSE",
                message=f"Duplicate row id {identity!r} in {query.root_field}",
                raw_payload=raw,
            )
        seen.add(identity)
    return result
