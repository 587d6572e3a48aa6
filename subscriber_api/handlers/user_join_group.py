"""Join-group endpoint: add an existing subscriber to a group looked up by name."""

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
from subscriber_api.schema.requests import JoinGroupRequest
from subscriber_api.schema.responses import SuccessResponse
from subscriber_api.services.mailerlite import MailerLiteClient, MailerLiteError, MailerLiteErrorKind
from subscriber_api.services.responses import create_error_response, create_success_response

logger = logging.getLogger(__name__)

INTERESTS_FIELD = "interests"


def _store_interests(
    mailerlite: MailerLiteClient,
    subscriber_id: str,
    payload: JoinGroupRequest,
    *,
    request_id: str | None,
) -> None:
    """Best effort: a failed interests update does not fail the join."""

    if payload.metadata is None or not payload.metadata.has_interests():
        return

    interests = payload.metadata.model_dump_json(by_alias=True, exclude_none=True)
    try:
        mailerlite.update_subscriber_fields(subscriber_id, {INTERESTS_FIELD: interests})
    except MailerLiteError as exc:
        logger.error(
            "Failed to update subscriber interests field",
            extra={"subscriber_id": subscriber_id, "kind": exc.kind.value, "request_id": request_id},
        )
        return
    logger.info("Successfully updated subscriber interests", extra={"subscriber_id": subscriber_id})


def handle(
    event: dict[str, Any],
    context: Any,
    *,
    settings: Settings,
    client: MailerLiteClient | None = None,
) -> dict[str, Any]:
    request_id = get_request_id(context)
    logger.info(
        "User join group endpoint called",
        extra={"request_id": request_id, "source_ip": get_source_ip(event)},
    )

    try:
        authenticate(event, settings, request_id=request_id)
        payload = validate_request(JoinGroupRequest, parse_json_body(event))

        with open_client(settings, client) as mailerlite:
            try:
                subscriber = mailerlite.get_subscriber_by_email(payload.email)
                if subscriber is None:
                    logger.warning("Subscriber not found", extra={"email": payload.email, "request_id": request_id})
                    raise ApiError(404, f"Subscriber with email {payload.email} not found")

                group = mailerlite.get_group_by_name(payload.group_name)
                if group is None:
                    logger.warning(
                        "Group not found",
                        extra={"group_name": payload.group_name, "request_id": request_id},
                    )
                    raise ApiError(404, f"Group with name '{payload.group_name}' not found")

                mailerlite.add_subscriber_to_group(subscriber.id, group.id)
            except MailerLiteError as exc:
                if exc.kind is MailerLiteErrorKind.ALREADY_IN_GROUP:
                    logger.info(
                        "Subscriber already in group",
                        extra={"email": payload.email, "group_name": payload.group_name},
                    )
                    return create_success_response(
                        SuccessResponse(
                            message=f"User {payload.email} is already in group '{payload.group_name}'"
                        )
                    )
                logger.error(
                    "MailerLite service error during join group operation",
                    extra={
                        "email": payload.email,
                        "group_name": payload.group_name,
                        "kind": exc.kind.value,
                        "request_id": request_id,
                    },
                )
                raise remote_error(exc, failure_message="Failed to add user to group. Please try again later.") from exc

            _store_interests(mailerlite, subscriber.id, payload, request_id=request_id)

        logger.info(
            "Successfully processed user join group request",
            extra={
                "email": payload.email,
                "group_name": payload.group_name,
                "subscriber_id": subscriber.id,
                "group_id": group.id,
                "request_id": request_id,
            },
        )
        return create_success_response(
            SuccessResponse(
                message=f"Successfully added user {payload.email} to group '{payload.group_name}'",
                subscriber_id=subscriber.id,
                group_id=group.id,
            )
        )
    except ApiError as exc:
        return create_error_response(exc.status_code, exc.message)
    except Exception:  # noqa: BLE001 - report as 500 without internals
        logger.exception("Unexpected error in user join group handler", extra={"request_id": request_id})
        return create_error_response(500, "An unexpected error occurred. Please try again later.")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return handle(event, context, settings=settings)
