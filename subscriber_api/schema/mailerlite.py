"""Pydantic models for MailerLite API resources."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _RemoteModel(BaseModel):
    # MailerLite ids arrive as numeric strings, but tolerate raw integers too.
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore", populate_by_name=True)


class Group(_RemoteModel):
    """A named segment subscribers can belong to."""

    id: str
    name: str


class Subscriber(_RemoteModel):
    """A contact record as returned by the subscribers endpoints."""

    id: str
    email: str
    status: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict, alias="fields")
    groups: list[str] = Field(default_factory=list)

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("groups", mode="before")
    @classmethod
    def _group_ids(cls, value: Any) -> Any:
        if value is None:
            return []
        return [item.get("id") if isinstance(item, dict) else item for item in value]
