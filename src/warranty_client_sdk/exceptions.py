from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None = None
    status_code: int = 0
    raw_payload: object | None = None

    def __str__(self) -> str:
        status = f"[{self.status_code}] " if self.status_code else ""
        return f"{status}{self.code}: {self.message}"


class FetchError(ApiError):
    """A paginated or single-record read failed; the view offers a manual retry."""


class TransportError(FetchError):
    """Network failure or a ``status=false`` envelope from the GraphQL endpoint."""


class MalformedResponseError(FetchError):
    """Envelope succeeded but the expected root field is missing or unreadable."""


class MutationError(ApiError):
    """Create/update/delete call rejected by the API."""


class RequestCancelledError(ApiError):
    """Request superseded by a newer one or issued against a closed table."""
