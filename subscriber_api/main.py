"""FastAPI app entry point for running the Lambda handlers locally."""

from __future__ import annotations

from fastapi import FastAPI

from subscriber_api.core.config import get_settings
from subscriber_api.core.logging_config import configure_logging
from subscriber_api.routers import endpoints


def create_app() -> FastAPI:
    """Build FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level)

    # CORS headers come from the handlers themselves, as they do behind API Gateway.
    app = FastAPI(title="Subscriber API", version=settings.app_version)
    app.include_router(endpoints.router)

    return app


app = create_app()
