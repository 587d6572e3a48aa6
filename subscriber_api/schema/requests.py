"""Pydantic schemas for inbound endpoint payloads."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    IPvAnyAddress,
    StrictFloat,
    StrictInt,
    StrictStr,
    StringConstraints,
)

SubscriberStatus = Literal["active", "unsubscribed", "unconfirmed", "bounced", "junk"]

SUBSCRIBER_STATUSES: tuple[str, ...] = ("active", "unsubscribed", "unconfirmed", "bounced", "junk")
MAILERLITE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
MAILERLITE_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$"

FieldValue = StrictStr | StrictInt | StrictFloat
GroupToken = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegistrationRequest(_RequestModel):
    """Inbound payload for registering a new subscriber."""

    email: EmailStr
    first_name: str | None = Field(None, alias="firstName", min_length=1, max_length=50)
    last_name: str | None = Field(None, alias="lastName", min_length=1, max_length=50)
    custom_fields: dict[str, FieldValue] | None = Field(None, alias="fields")
    groups: list[GroupToken] | None = Field(None, description="Group names or numeric group ids")


class SubscriptionRequest(RegistrationRequest):
    """Registration payload plus the subscription attributes MailerLite records."""

    subscribed_at: str | None = Field(None, pattern=MAILERLITE_DATETIME_PATTERN)
    ip_address: IPvAnyAddress | None = None
    status: SubscriberStatus | None = None


class InterestMetadata(_RequestModel):
    certification_interests: str | None = Field(None, alias="certificationInterests")
    additional_interests: str | None = Field(None, alias="additionalInterests")

    def has_interests(self) -> bool:
        return bool(self.certification_interests or self.additional_interests)


class JoinGroupRequest(_RequestModel):
    """Inbound payload for adding an existing subscriber to a named group."""

    email: EmailStr
    group_name: str = Field(..., alias="groupName", min_length=1, max_length=100)
    metadata: InterestMetadata | None = None
