"""Turn pydantic validation failures into one human-readable message."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from subscriber_api.schema.requests import SUBSCRIBER_STATUSES

ModelT = TypeVar("ModelT", bound=BaseModel)

ANY_ERROR = "*"

# Keyed by the payload (alias) name, then by pydantic error type.
FIELD_MESSAGES: dict[str, dict[str, str]] = {
    "email": {
        "missing": "Email is required",
        ANY_ERROR: "Please provide a valid email address",
    },
    "firstName": {
        "string_too_short": "First name must be at least 1 character long",
        "string_too_long": "First name must not exceed 50 characters",
        ANY_ERROR: "First name must be a string",
    },
    "lastName": {
        "string_too_short": "Last name must be at least 1 character long",
        "string_too_long": "Last name must not exceed 50 characters",
        ANY_ERROR: "Last name must be a string",
    },
    "groupName": {
        "missing": "Group name is required",
        "string_too_short": "Group name must be at least 1 character long",
        "string_too_long": "Group name must not exceed 100 characters",
        ANY_ERROR: "Group name must be a string",
    },
    "fields": {ANY_ERROR: "fields must map names to string or number values"},
    "groups": {
        "string_too_short": "groups must not contain empty names",
        ANY_ERROR: "groups must be a list of strings",
    },
    "subscribed_at": {ANY_ERROR: "subscribed_at must be in format 'yyyy-MM-dd HH:mm:ss'"},
    "ip_address": {ANY_ERROR: "ip_address must be a valid IP address"},
    "status": {ANY_ERROR: f"status must be one of: {', '.join(SUBSCRIBER_STATUSES)}"},
    "metadata": {ANY_ERROR: "metadata must be an object of string values"},
}


class RequestValidationError(ValueError):
    """Raised when a payload violates its endpoint schema.

    ``str(exc)`` lists every violation, joined with ``", "``.
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__(", ".join(messages))


def _describe(error: dict[str, Any]) -> str:
    loc = error.get("loc") or ()
    if not loc:
        return "Request body must be a JSON object"

    field = str(loc[0])
    messages = FIELD_MESSAGES.get(field)
    if messages is None:
        return f"{field}: {error.get('msg', 'is invalid')}"
    return messages.get(error.get("type", ""), messages.get(ANY_ERROR, f"{field} is invalid"))


def validate_payload(model: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model``, collecting all violations rather than the first."""

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        messages: list[str] = []
        for error in exc.errors():
            message = _describe(error)
            # Union members report separately; keep one line per violation.
            if message not in messages:
                messages.append(message)
        raise RequestValidationError(messages) from exc
