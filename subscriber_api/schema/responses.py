"""Pydantic models for endpoint response bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SuccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    subscriber_id: str | None = Field(None, alias="subscriberId")
    group_id: str | None = Field(None, alias="groupId")


class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: str


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str
