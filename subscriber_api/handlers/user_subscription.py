"""User subscription endpoint: create an active MailerLite subscriber with consent details."""

from __future__ import annotations

import ipaddress
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
    parse_json_body,
    remote_error,
    validate_request,
)
from subscriber_api.schema.requests import MAILERLITE_DATETIME_FORMAT, SubscriptionRequest
from subscriber_api.schema.responses import SuccessResponse
from subscriber_api.services.mailerlite import MailerLiteClient, MailerLiteError
from subscriber_api.services.responses import create_error_response, create_success_response

logger = logging.getLogger(__name__)


def _apply_defaults(payload: SubscriptionRequest, event: dict[str, Any]) -> SubscriptionRequest:
    """Fill consent details the caller left out from the request itself."""

    updates: dict[str, Any] = {}
    if payload.ip_address is None:
        source_ip = get_source_ip(event)
        try:
            updates["ip_address"] = ipaddress.ip_address(source_ip) if source_ip else None
        except ValueError:
            # API Gateway's test console sends a placeholder, not an address.
            logger.debug("Ignoring non-IP source address", extra={"source_ip": source_ip})
    if not payload.subscribed_at:
        updates["subscribed_at"] = datetime.now(timezone.utc).strftime(MAILERLITE_DATETIME_FORMAT)
    if not payload.status:
        updates["status"] = "active"
    return payload.model_copy(update=updates)


def handle(
    event: dict[str, Any],
    context: Any,
    *,
    settings: Settings,
    client: MailerLiteClient | None = None,
) -> dict[str, Any]:
    request_id = get_request_id(context)
    logger.info(
        "User subscription endpoint called",
        extra={"request_id": request_id, "source_ip": get_source_ip(event)},
    )

    try:
        authenticate(event, settings, request_id=request_id)
        payload = validate_request(SubscriptionRequest, parse_json_body(event))
        payload = _apply_defaults(payload, event)

        with open_client(settings, client) as mailerlite:
            try:
                subscriber_id = mailerlite.create_subscriber(payload)
            except MailerLiteError as exc:
                logger.error(
                    "MailerLite subscription failed",
                    extra={"email": payload.email, "kind": exc.kind.value, "request_id": request_id},
                )
                raise remote_error(exc, failure_message="Failed to subscribe user. Please try again later.") from exc

        logger.info(
            "User subscription completed successfully",
            extra={
                "email": payload.email,
                "subscriber_id": subscriber_id,
                "request_id": request_id,
                "status": payload.status,
                "subscribed_at": payload.subscribed_at,
                "ip_address": str(payload.ip_address) if payload.ip_address else None,
            },
        )
        return create_success_response(
            SuccessResponse(message="User subscribed successfully", subscriber_id=subscriber_id)
        )
    except ApiError as exc:
        return create_error_response(exc.status_code, exc.message)
    except Exception:  # noqa: BLE001 - report as 500 without internals
        logger.exception("Unexpected error in user subscription", extra={"request_id": request_id})
        return create_error_response(500, "An unexpected error occurred")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return handle(event, context, settings=settings)
