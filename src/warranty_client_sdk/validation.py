from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str
    row_index: int | None = None


class ClientValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        location = f"row {issue.row_index}" if issue.row_index is not None else "payload"
        return f"{location} {issue.field}: {issue.reason}"


def coerce_input(payload: T | Mapping[str, Any], model_type: type[T], row_index: int | None = None) -> T:
    """Validate a mutation input, turning pydantic errors into ``ClientValidationError``."""
    if isinstance(payload, model_type):
        return payload
    try:
        return model_type.model_validate(payload)
    except PydanticValidationError as exc:
        issues = [
            ValidationIssue(
                field=".".join(str(part) for part in error.get("loc", ("payload",))) or "payload",
                reason=str(error.get("msg", "Invalid value")),
                row_index=row_index,
            )
            for error in exc.errors()
        ]
        raise ClientValidationError(issues or [ValidationIssue(field="payload", reason="Invalid value")]) from exc


def require_user_id(user_id: int | None, field: str = "createdById") -> int:
    if user_id is None:
        raise_issue(field, "a signed-in user id is required for this operation")
    return user_id


def raise_issue(field: str, reason: str, row_index: int | None = None) -> None:
    raise ClientValidationError([ValidationIssue(field=field, reason=reason, row_index=row_index)])
