from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, FetchError, RequestCancelledError
from .validation import ClientValidationError


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    retryable: bool = False

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: ApiError | ClientValidationError) -> UserFacingError:
    if isinstance(exc, ClientValidationError):
        return UserFacingError(message=str(exc), details="CLIENT_VALIDATION", retryable=False)
    primary = exc.message.strip() or "Request failed"
    details = exc.code if not exc.status_code else f"{exc.code} (HTTP {exc.status_code})"
    if exc.details:
        details = f"{details}: {exc.details}"
    retryable = isinstance(exc, (FetchError, RequestCancelledError))
    return UserFacingError(message=primary, details=details, retryable=retryable)
