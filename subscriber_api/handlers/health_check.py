"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from subscriber_api.core.config import Settings, get_settings
from subscriber_api.core.logging_config import configure_logging
from subscriber_api.handlers.common import get_request_id, get_source_ip
from subscriber_api.schema.responses import HealthCheckResponse
from subscriber_api.services.responses import create_error_response, create_success_response

logger = logging.getLogger(__name__)


def handle(event: dict[str, Any], context: Any, *, settings: Settings) -> dict[str, Any]:
    request_id = get_request_id(context)
    try:
        logger.info(
            "Health check endpoint called",
            extra={"request_id": request_id, "source_ip": get_source_ip(event)},
        )
        response = HealthCheckResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=settings.app_version,
            environment=settings.environment,
        )
        logger.info("Health check completed successfully")
        return create_success_response(response)
    except Exception:  # noqa: BLE001 - report as 500 without internals
        logger.exception("Health check failed", extra={"request_id": request_id})
        return create_error_response(500, "Health check failed")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point."""

    settings = get_settings()
    configure_logging(settings.log_level)
    return handle(event, context, settings=settings)
