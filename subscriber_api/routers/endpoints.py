"""Expose the Lambda handlers over FastAPI for local development."""

from __future__ import annotations

import base64
import uuid
from types import SimpleNamespace
from typing import Any, Callable

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool

from subscriber_api.core.config import get_settings
from subscriber_api.handlers import (
    health_check,
    user_join_group,
    user_registration,
    user_subscription,
    user_unsubscribe,
)

router = APIRouter(tags=["subscribers"])

LambdaHandle = Callable[..., dict[str, Any]]


async def _to_proxy_event(request: Request, path_parameters: dict[str, str] | None = None) -> dict[str, Any]:
    """Shape a request like an API Gateway REST proxy event."""

    raw_body = await request.body()
    body: str | None = None
    is_base64 = False
    if raw_body:
        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            body = base64.b64encode(raw_body).decode("ascii")
            is_base64 = True

    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "pathParameters": path_parameters,
        "body": body,
        "isBase64Encoded": is_base64,
        "requestContext": {"identity": {"sourceIp": request.client.host if request.client else None}},
    }


def _to_response(result: dict[str, Any]) -> Response:
    return Response(
        content=result["body"],
        status_code=result["statusCode"],
        headers=result["headers"],
    )


async def _invoke(
    handle: LambdaHandle,
    request: Request,
    path_parameters: dict[str, str] | None = None,
) -> Response:
    event = await _to_proxy_event(request, path_parameters)
    context = SimpleNamespace(aws_request_id=str(uuid.uuid4()))
    result = await run_in_threadpool(handle, event, context, settings=get_settings())
    return _to_response(result)


@router.get("/health")
async def health(request: Request) -> Response:
    return await _invoke(health_check.handle, request)


@router.post("/register")
async def register(request: Request) -> Response:
    return await _invoke(user_registration.handle, request)


@router.post("/subscribe")
async def subscribe(request: Request) -> Response:
    return await _invoke(user_subscription.handle, request)


@router.post("/join-group")
async def join_group(request: Request) -> Response:
    return await _invoke(user_join_group.handle, request)


@router.post("/unsubscribe/{subscriber_id}")
async def unsubscribe(subscriber_id: str, request: Request) -> Response:
    return await _invoke(user_unsubscribe.handle, request, {"id": subscriber_id})
