"""Unsubscribe endpoint: mark a subscriber (by path id) as unsubscribed."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from subscriber_api.core.config import Settings, get_settings
from subscriber_api.core.logging_config import configure_logging
from subscriber_api.handlers.common import (
    ApiError,
    authenticate,
    get_request_id,
    get_source_ip,
    open_client,
    remote_error,
)
from subscriber_api.schema.requests import MAILERLITE_DATETIME_FORMAT
from subscriber_api.schema.responses import SuccessResponse
from subscriber_api.services.mailerlite import MailerLiteClient, MailerLiteError
from subscriber_api.services.responses import create_error_response, create_success_response

logger = logging.getLogger(__name__)


def _subscriber_id(event: dict[str, Any]) -> str:
    subscriber_id = (event.get("pathParameters") or {}).get("id")
    if subscriber_id is None:
        logger.warning("Subscriber ID not provided in path parameters")
        raise ApiError(400, "Subscriber ID is required")
    if not subscriber_id.strip():
        logger.warning("Empty subscriber ID provided")
        raise ApiError(400, "Invalid subscriber ID")
    return subscriber_id.strip()


def handle(
    event: dict[str, Any],
    context: Any,
    *,
    settings: Settings,
    client: MailerLiteClient | None = None,
) -> dict[str, Any]:
    request_id = get_request_id(context)
    logger.info(
        "User unsubscribe endpoint called",
        extra={"request_id": request_id, "source_ip": get_source_ip(event)},
    )

    try:
        authenticate(event, settings, request_id=request_id)
        subscriber_id = _subscriber_id(event)

        update = {
            "status": "unsubscribed",
            "unsubscribed_at": datetime.now(timezone.utc).strftime(MAILERLITE_DATETIME_FORMAT),
        }
        with open_client(settings, client) as mailerlite:
            try:
                mailerlite.update_subscriber(subscriber_id, update)
            except MailerLiteError as exc:
                logger.error(
                    "MailerLite unsubscribe failed",
                    extra={"subscriber_id": subscriber_id, "kind": exc.kind.value, "request_id": request_id},
                )
                raise remote_error(exc, failure_message="Failed to unsubscribe user. Please try again later.") from exc

        logger.info(
            "User unsubscribe completed successfully",
            extra={
                "subscriber_id": subscriber_id,
                "request_id": request_id,
                "unsubscribed_at": update["unsubscribed_at"],
            },
        )
        return create_success_response(
            SuccessResponse(message="User unsubscribed successfully", subscriber_id=subscriber_id)
        )
    except ApiError as exc:
        return create_error_response(exc.status_code, exc.message)
    except Exception:  # noqa: BLE001 - report as 500 without internals
        logger.exception("Unexpected error in user unsubscribe", extra={"request_id": request_id})
        return create_error_response(500, "An unexpected error occurred")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return handle(event, context, settings=settings)
