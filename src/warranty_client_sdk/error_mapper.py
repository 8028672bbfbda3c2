from __future__ import annotations

from typing import Any, Mapping

from .exceptions import ApiError, MutationError, TransportError
from .models import ApiEnvelope

DEFAULT_ERROR_MESSAGE = "Request failed"


def _first_error(payload: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        return {}
    errors = payload.get("errors")
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], Mapping):
        return {}
    return errors[0]


def resolve_error_message(payload: Mapping[str, Any] | None, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Pick the human-readable reason out of a GraphQL error body.

    Validation pipes on the server put their messages in
    ``extensions.originalError.message`` (sometimes as a list); everything
    else only fills the top-level ``message``.
    """
    first = _first_error(payload)
    extensions = first.get("extensions")
    original = extensions.get("originalError") if isinstance(extensions, Mapping) else None
    if isinstance(original, Mapping) and original.get("message") is not None:
        message = original["message"]
        if isinstance(message, list):
            return str(message[0]) if message else fallback
        return str(message)
    return str(first.get("message") or fallback)


def resolve_error_code(payload: Mapping[str, Any] | None) -> str:
    extensions = _first_error(payload).get("extensions")
    if isinstance(extensions, Mapping) and extensions.get("code"):
        return str(extensions["code"])
    return "GRAPHQL_ERROR"


def map_envelope_error(envelope: ApiEnvelope, *, mutation: bool = False) -> ApiError:
    mapped: type[ApiError] = MutationError if mutation else TransportError
    return mapped(
        code=envelope.code or "GRAPHQL_ERROR",
        message=envelope.message or DEFAULT_ERROR_MESSAGE,
        details=envelope.errors or None,
        status_code=envelope.status_code,
        raw_payload=envelope.model_dump(),
    )
