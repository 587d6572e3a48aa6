"""Request plumbing shared by the Lambda handlers."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from pydantic import BaseModel

from subscriber_api.core.config import Settings
from subscriber_api.services.auth import extract_token, verify_token
from subscriber_api.services.mailerlite import MailerLiteClient, MailerLiteError, MailerLiteErrorKind
from subscriber_api.services.validation import RequestValidationError, validate_payload

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CONFIGURATION_ERROR_MESSAGE = "Service configuration error"
UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again later."

# Must cover every MailerLiteErrorKind.
REMOTE_ERROR_STATUS: dict[MailerLiteErrorKind, int] = {
    MailerLiteErrorKind.INVALID_DATA: 400,
    MailerLiteErrorKind.GROUPS_NOT_FOUND: 400,
    MailerLiteErrorKind.ALREADY_IN_GROUP: 400,
    MailerLiteErrorKind.API_ERROR: 400,
    MailerLiteErrorKind.NOT_FOUND: 404,
    MailerLiteErrorKind.INVALID_API_KEY: 500,
    MailerLiteErrorKind.RATE_LIMITED: 500,
    MailerLiteErrorKind.UPSTREAM_UNAVAILABLE: 500,
    MailerLiteErrorKind.UNEXPECTED: 500,
}


class ApiError(Exception):
    """Raised inside a handler to short-circuit with an error envelope."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_request_id(context: Any) -> str | None:
    return getattr(context, "aws_request_id", None)


def get_source_ip(event: dict[str, Any]) -> str | None:
    request_context = event.get("requestContext") or {}
    identity = request_context.get("identity") or {}
    return identity.get("sourceIp") or (request_context.get("http") or {}).get("sourceIp")


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup; API Gateway preserves client casing."""

    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def authenticate(event: dict[str, Any], settings: Settings, *, request_id: str | None = None) -> None:
    """Require a valid bearer token on the request."""

    token = extract_token(get_header(event, "Authorization"))
    if not token:
        logger.warning("No JWT token provided in Authorization header", extra={"request_id": request_id})
        raise ApiError(401, "Authentication token is required")

    if not verify_token(token, settings.public_jwt_secret):
        logger.warning(
            "Invalid JWT token provided",
            extra={"request_id": request_id, "source_ip": get_source_ip(event)},
        )
        raise ApiError(401, "Invalid authentication token")

    logger.info("JWT authentication successful", extra={"request_id": request_id})


def parse_json_body(event: dict[str, Any]) -> Any:
    """Decode the request body as JSON."""

    body = event.get("body")
    if not body:
        logger.warning("Empty request body received")
        raise ApiError(400, "Request body is required")

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            logger.warning("Invalid base64 request body", exc_info=exc)
            raise ApiError(400, "Invalid JSON format") from exc

    try:
        return json.loads(body)
    except ValueError as exc:
        logger.warning("Invalid JSON in request body", exc_info=exc)
        raise ApiError(400, "Invalid JSON format") from exc


def validate_request(model: type[ModelT], data: Any) -> ModelT:
    try:
        return validate_payload(model, data)
    except RequestValidationError as exc:
        logger.warning("Validation failed", extra={"validation_error": str(exc)})
        raise ApiError(400, str(exc)) from exc


def require_api_key(settings: Settings) -> str:
    if not settings.mailerlite_api_key:
        logger.error("MailerLite API key not configured")
        raise ApiError(500, CONFIGURATION_ERROR_MESSAGE)
    return settings.mailerlite_api_key


@contextmanager
def open_client(settings: Settings, client: MailerLiteClient | None = None) -> Iterator[MailerLiteClient]:
    """Yield ``client`` as-is, or a fresh client that is closed afterwards."""

    require_api_key(settings)
    if client is not None:
        yield client
        return
    with MailerLiteClient.from_settings(settings) as owned:
        yield owned


def remote_error(exc: MailerLiteError, *, failure_message: str) -> ApiError:
    """Map a tagged MailerLite failure onto the HTTP error taxonomy.

    Client-facing kinds keep the MailerLite message; server-side kinds are
    replaced so internals never leak.
    """

    status_code = REMOTE_ERROR_STATUS[exc.kind]
    if exc.kind is MailerLiteErrorKind.INVALID_API_KEY:
        return ApiError(status_code, CONFIGURATION_ERROR_MESSAGE)
    if exc.kind is MailerLiteErrorKind.RATE_LIMITED:
        return ApiError(status_code, UNAVAILABLE_MESSAGE)
    if status_code >= 500:
        return ApiError(status_code, failure_message)
    return ApiError(status_code, exc.message)
