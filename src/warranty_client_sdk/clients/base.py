from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..cache import CacheKey, ResponseCache
from ..error_mapper import map_envelope_error
from ..exceptions import ApiError, MalformedResponseError, MutationError
from ..fetcher import PaginatedQuery, ServerFetcher
from ..logging_utils import log_json
from ..models import PaginatedResult
from ..query_state import PageQueryState, QuerySnapshot
from ..table import PaginatedTable
from ..telemetry import TelemetryLogger
from ..transport import GraphQLTransport
from ..validation import require_user_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class SessionContext:
    """Who is acting; stamped onto ``createdById`` / ``updatedById`` / ``userid``."""

    user_id: int | None = None
    role: str | None = None


@dataclass
class BaseClient:
    transport: GraphQLTransport
    cache: ResponseCache
    context: SessionContext = field(default_factory=SessionContext)
    telemetry: TelemetryLogger | None = None
    module: str = "base"

    def __post_init__(self) -> None:
        self.fetcher = ServerFetcher(self.transport, self.cache)

    def _snapshot(self, state: PageQueryState | QuerySnapshot | None) -> QuerySnapshot:
        if state is None:
            return PageQueryState(page_size=self.transport.config.default_page_size).freeze()
        if isinstance(state, PageQueryState):
            return state.freeze()
        return state

    def _paginate(
        self,
        query: PaginatedQuery,
        state: PageQueryState | QuerySnapshot | None,
        scope: Mapping[str, Any] | None,
    ) -> PaginatedResult:
        started = time.monotonic()
        try:
            result = self.fetcher.fetch(query, self._snapshot(state), scope)
        except ApiError as exc:
            self._record(query.root_field, started, success=False, error_code=exc.code)
            raise
        self._record(query.root_field, started, success=True)
        return result

    def _actor(self, field_name: str = "createdById") -> int:
        return require_user_id(self.context.user_id, field_name)

    def _table(self, query: PaginatedQuery, scope: Mapping[str, Any] | None, **kwargs: Any) -> PaginatedTable:
        return PaginatedTable(self.fetcher, query, scope=scope, **kwargs)

    def _query_one(
        self,
        document: str,
        variables: dict[str, Any],
        root_field: str,
        model: Type[ModelT],
        *,
        cache_key: CacheKey | None = None,
    ) -> ModelT:
        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached
        started = time.monotonic()
        envelope = self.transport.call(document, variables, operation=root_field)
        if not envelope.status:
            self._record(root_field, started, success=False, error_code=envelope.code)
            raise map_envelope_error(envelope)
        parsed = self._read_root(envelope.data, root_field, model)
        self._record(root_field, started, success=True)
        if cache_key is not None:
            self.cache.set(cache_key, parsed)
        return parsed

    def _mutate(
        self,
        document: str,
        variables: dict[str, Any],
        root_field: str,
        model: Type[ModelT],
        *,
        invalidate: list[CacheKey] | None = None,
    ) -> ModelT:
        started = time.monotonic()
        envelope = self.transport.call(document, variables, operation=root_field)
        if not envelope.status:
            self._record(root_field, started, success=False, error_code=envelope.code)
            log_json(logger, {"event": "mutation_failed", "operation": root_field, "message": envelope.message})
            raise map_envelope_error(envelope, mutation=True)
        for prefix in invalidate or []:
            self.cache.invalidate(prefix)
        self._record(root_field, started, success=True)
        log_json(logger, {"event": "mutation_applied", "operation": root_field})
        try:
            return self._read_root(envelope.data, root_field, model)
        except MalformedResponseError as exc:
            # the write already committed
            raise MutationError(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                raw_payload=exc.raw_payload,
            ) from exc

    @staticmethod
    def _read_root(data: Mapping[str, Any], root_field: str, model: Type[ModelT]) -> ModelT:
        raw = data.get(root_field)
        if raw is None:
            raise MalformedResponseError(
                code="MALFORMED_RESPONSE",
                message="Value not found in response",
                details={"root_field": root_field},
                raw_payload=dict(data),
            )
        if not isinstance(raw, Mapping):
            raw = {"value": raw}
        try:
            return model.model_validate(raw)
        except PydanticValidationError as exc:
            raise MalformedResponseError(
                code="MALFORMED_RESPONSE",
                message=f"Invalid {root_field} payload",
                details=exc.errors(include_url=False),
                raw_payload=raw,
            ) from exc

    def _record(self, action: str, started: float, *, success: bool, error_code: str | None = None) -> None:
        if self.telemetry is None:
            return
        self.telemetry.record_call(
            module=self.module,
            action=action,
            success=success,
            duration_ms=int((time.monotonic() - started) * 1000),
            error_code=error_code,
        )
