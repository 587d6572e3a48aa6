"""Unit tests for request schema validation and error joining."""

from __future__ import annotations

import ipaddress

import pytest

from subscriber_api.schema.requests import JoinGroupRequest, RegistrationRequest, SubscriptionRequest
from subscriber_api.services.validation import RequestValidationError, validate_payload


def test_registration_payload_is_normalised():
    payload = validate_payload(
        RegistrationRequest,
        {
            "email": "jane@example.com",
            "firstName": "Jane",
            "lastName": "Doe",
            "fields": {"company": "Acme", "seats": 3},
            "groups": ["Newsletter", "456"],
            "unexpected": "dropped",
        },
    )

    assert payload.email == "jane@example.com"
    assert payload.first_name == "Jane"
    assert payload.last_name == "Doe"
    assert payload.custom_fields == {"company": "Acme", "seats": 3}
    assert payload.groups == ["Newsletter", "456"]
    assert not hasattr(payload, "unexpected")


def test_missing_email_is_reported():
    with pytest.raises(RequestValidationError, match="Email is required"):
        validate_payload(RegistrationRequest, {"firstName": "Jane"})


def test_invalid_email_is_reported():
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(RegistrationRequest, {"email": "not-an-email"})
    assert "valid email address" in str(exc_info.value)


def test_all_violations_are_joined():
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(
            SubscriptionRequest,
            {
                "email": "bad",
                "firstName": "x" * 51,
                "subscribed_at": "2024-01-01T10:00:00Z",
                "ip_address": "999.1.1.1",
                "status": "pending",
            },
        )

    error = exc_info.value
    assert error.messages == [
        "Please provide a valid email address",
        "First name must not exceed 50 characters",
        "subscribed_at must be in format 'yyyy-MM-dd HH:mm:ss'",
        "ip_address must be a valid IP address",
        "status must be one of: active, unsubscribed, unconfirmed, bounced, junk",
    ]
    assert str(error) == ", ".join(error.messages)


def test_subscription_accepts_strict_timestamp_and_ipv6():
    payload = validate_payload(
        SubscriptionRequest,
        {
            "email": "jane@example.com",
            "subscribed_at": "2024-05-01 09:30:00",
            "ip_address": "2001:db8::1",
            "status": "unconfirmed",
        },
    )

    assert payload.subscribed_at == "2024-05-01 09:30:00"
    assert payload.ip_address == ipaddress.ip_address("2001:db8::1")
    assert payload.status == "unconfirmed"


def test_non_numeric_field_values_are_rejected_once():
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(RegistrationRequest, {"email": "jane@example.com", "fields": {"tags": ["a"]}})
    assert exc_info.value.messages == ["fields must map names to string or number values"]


def test_boolean_field_values_are_not_coerced():
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(RegistrationRequest, {"email": "jane@example.com", "fields": {"vip": True}})
    assert exc_info.value.messages == ["fields must map names to string or number values"]


def test_numeric_strings_in_fields_stay_strings():
    payload = validate_payload(RegistrationRequest, {"email": "jane@example.com", "fields": {"zip": "02134", "score": 4.5}})

    assert payload.custom_fields == {"zip": "02134", "score": 4.5}


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_group_names_are_rejected(blank):
    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(RegistrationRequest, {"email": "jane@example.com", "groups": ["Newsletter", blank]})
    assert exc_info.value.messages == ["groups must not contain empty names"]


@pytest.mark.parametrize(
    ("group_name", "message"),
    [
        (None, "Group name is required"),
        ("", "Group name must be at least 1 character long"),
        ("g" * 101, "Group name must not exceed 100 characters"),
    ],
)
def test_join_group_name_rules(group_name, message):
    data = {"email": "jane@example.com"}
    if group_name is not None:
        data["groupName"] = group_name

    with pytest.raises(RequestValidationError) as exc_info:
        validate_payload(JoinGroupRequest, data)
    assert exc_info.value.messages == [message]


def test_join_group_metadata_is_parsed():
    payload = validate_payload(
        JoinGroupRequest,
        {
            "email": "jane@example.com",
            "groupName": "Test Group",
            "metadata": {"certificationInterests": "AWS, Azure"},
        },
    )

    assert payload.group_name == "Test Group"
    assert payload.metadata is not None
    assert payload.metadata.has_interests()
    assert payload.metadata.additional_interests is None


def test_non_object_body_is_rejected():
    with pytest.raises(RequestValidationError, match="must be a JSON object"):
        validate_payload(RegistrationRequest, ["jane@example.com"])
