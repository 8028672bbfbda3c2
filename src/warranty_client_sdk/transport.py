from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig, ConfigError
from .error_mapper import resolve_error_code, resolve_error_message
from .exceptions import TransportError
from .models import ApiEnvelope

logger = logging.getLogger(__name__)

RequestHook = Callable[[str, dict[str, Any]], None]
ResponseHook = Callable[[requests.Response], None]

UPLOAD_PATH = "uploader/upload"


@dataclass
class LastOperation:
    operation: str
    duration_ms: int
    result: str


@dataclass
class GraphQLTransport:
    """POSTs ``{query, variables}`` documents and folds every failure into an envelope."""

    config: ClientConfig
    session: requests.Session | None = None
    before_request: RequestHook | None = None
    after_response: ResponseHook | None = None
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    @property
    def _timeout(self) -> tuple[float, float]:
        return (self.config.connect_timeout_seconds, self.config.read_timeout_seconds)

    def call(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        *,
        operation: str = "graphql",
    ) -> ApiEnvelope:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        request_headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)
        body = {"query": query, "variables": variables or {}}
        if self.before_request:
            self.before_request(self.config.graphql_url, body)

        started = time.monotonic()
        try:
            response = self.session.post(
                self.config.graphql_url,
                headers=request_headers,
                json=body,
                timeout=self._timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            self._record(operation, started, "error")
            logger.warning("graphql_transport_failed", extra={"operation": operation, "error": type(exc).__name__})
            return ApiEnvelope(status=False, message=str(exc), code="TRANSPORT_ERROR")

        if self.after_response:
            self.after_response(response)

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            payload = None

        if not isinstance(payload, dict):
            self._record(operation, started, "error")
            message = response.text.strip() or response.reason or "Request failed"
            return ApiEnvelope(
                status=False,
                message=message,
                code="HTTP_ERROR" if not response.ok else "INVALID_RESPONSE",
                status_code=response.status_code,
            )

        data = payload.get("data")
        if not data:
            self._record(operation, started, "error")
            errors = payload.get("errors") if isinstance(payload.get("errors"), list) else []
            return ApiEnvelope(
                status=False,
                message=resolve_error_message(payload),
                code=resolve_error_code(payload),
                status_code=response.status_code,
                errors=errors,
            )

        self._record(operation, started, "success")
        return ApiEnvelope(status=True, message="Success", data=data, status_code=response.status_code)

    def upload_file(self, path: str | Path, *, field_name: str = "file") -> dict[str, Any]:
        if not self.config.upload_url:
            raise ConfigError("Missing required config values: WARRANTY_UPLOAD_URL")
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        url = self.config.upload_url.rstrip("/") + "/" + UPLOAD_PATH
        file_path = Path(path)
        started = time.monotonic()
        try:
            with file_path.open("rb") as handle:
                response = self.session.post(
                    url,
                    files={field_name: (file_path.name, handle)},
                    timeout=self._timeout,
                    verify=self.config.verify_ssl,
                )
        except requests.RequestException as exc:
            self._record("upload_file", started, "error")
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc),
                details={"type": type(exc).__name__},
            ) from exc

        try:
            parsed = response.json()
        except (json.JSONDecodeError, ValueError):
            parsed = {"message": response.text}
        if not response.ok:
            self._record("upload_file", started, "error")
            message = parsed.get("message") if isinstance(parsed, dict) else None
            raise TransportError(
                code="UPLOAD_FAILED",
                message=str(message or "Upload failed"),
                status_code=response.status_code,
                raw_payload=parsed,
            )
        self._record("upload_file", started, "success")
        return parsed if isinstance(parsed, dict) else {"data": parsed}

    def _record(self, operation: str, started: float, result: str) -> None:
        self.last_operation = LastOperation(
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
        )
