"""Build API Gateway proxy results with the fixed CORS header set."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from subscriber_api.schema.responses import ErrorResponse

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

ERROR_CATEGORIES = {
    400: "Bad Request",
    401: "Unauthorized",
    404: "Not Found",
    500: "Internal Server Error",
}


def create_response(
    status_code: int,
    body: BaseModel | dict[str, Any],
    extra_headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {
        "statusCode": status_code,
        "headers": {**CORS_HEADERS, **(extra_headers or {})},
        "body": json.dumps(body),
    }


def create_error_response(status_code: int, message: str, error: str | None = None) -> dict[str, Any]:
    """Error envelope: ``{error, message, timestamp}``."""

    payload = ErrorResponse(
        error=error or ERROR_CATEGORIES.get(status_code, "Error"),
        message=message,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return create_response(status_code, payload)


def create_success_response(body: BaseModel | dict[str, Any]) -> dict[str, Any]:
    return create_response(200, body)
