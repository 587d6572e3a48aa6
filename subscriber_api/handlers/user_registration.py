"""User registration endpoint: create a MailerLite subscriber."""

from __future__ import annotations

import logging
from typing import Any

from subscriber_api.core.config import Settings, get_settings
from subscriber_api.core.logging_config import configure_logging
from subscriber_api.handlers.common import (
    ApiError,
    authenticate,
    get_request_id,
    get_source_ip,
    open_client,
    parse_json_body,
    remote_error,
    validate_request,
)
from subscriber_api.schema.requests import RegistrationRequest
from subscriber_api.schema.responses import SuccessResponse
from subscriber_api.services.mailerlite import MailerLiteClient, MailerLiteError
from subscriber_api.services.responses import create_error_response, create_success_response

logger = logging.getLogger(__name__)


def handle(
    event: dict[str, Any],
    context: Any,
    *,
    settings: Settings,
    client: MailerLiteClient | None = None,
) -> dict[str, Any]:
    request_id = get_request_id(context)
    logger.info(
        "User registration endpoint called",
        extra={"request_id": request_id, "source_ip": get_source_ip(event)},
    )

    try:
        authenticate(event, settings, request_id=request_id)
        payload = validate_request(RegistrationRequest, parse_json_body(event))

        with open_client(settings, client) as mailerlite:
            try:
                subscriber_id = mailerlite.create_subscriber(payload)
            except MailerLiteError as exc:
                logger.error(
                    "MailerLite registration failed",
                    extra={"email": payload.email, "kind": exc.kind.value, "request_id": request_id},
                )
                raise remote_error(exc, failure_message="Failed to register user. Please try again later.") from exc

        logger.info(
            "User registration completed successfully",
            extra={"email": payload.email, "subscriber_id": subscriber_id, "request_id": request_id},
        )
        return create_success_response(
            SuccessResponse(message="User registered successfully", subscriber_id=subscriber_id)
        )
    except ApiError as exc:
        return create_error_response(exc.status_code, exc.message)
    except Exception:  # noqa: BLE001 - report as 500 without internals
        logger.exception("Unexpected error in user registration", extra={"request_id": request_id})
        return create_error_response(500, "An unexpected error occurred")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return handle(event, context, settings=settings)
