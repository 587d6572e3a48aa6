"""Client for the MailerLite subscriber-management API."""

from __future__ import annotations

import enum
import logging
from typing import Any, Iterable

import httpx

from subscriber_api.core.config import Settings
from subscriber_api.schema.mailerlite import Group, Subscriber
from subscriber_api.schema.requests import RegistrationRequest, SubscriptionRequest

logger = logging.getLogger(__name__)

MAILERLITE_API_BASE = "https://connect.mailerlite.com/api"


class MailerLiteErrorKind(enum.Enum):
    """Failure categories handlers map onto HTTP status codes."""

    INVALID_DATA = "invalid_data"
    INVALID_API_KEY = "invalid_api_key"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    ALREADY_IN_GROUP = "already_in_group"
    GROUPS_NOT_FOUND = "groups_not_found"
    API_ERROR = "api_error"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UNEXPECTED = "unexpected"


class MailerLiteError(Exception):
    """Raised for any failed MailerLite call, tagged with a :class:`MailerLiteErrorKind`."""

    def __init__(self, kind: MailerLiteErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code


INVALID_API_KEY_MESSAGE = "Invalid MailerLite API key"
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later"
UNAVAILABLE_MESSAGE = "MailerLite API is unavailable"


def _remote_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


def _is_group_id(token: str) -> bool:
    return token.isdigit()


class MailerLiteClient:
    """Thin wrapper over the MailerLite REST API.

    Every method raises :class:`MailerLiteError` on failure; calls are made
    once, without retries, under a per-request timeout.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = MAILERLITE_API_BASE,
        timeout: float = 10.0,
        validation_timeout: float = 5.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("MailerLite API key is required")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._validation_timeout = validation_timeout
        self._http = http_client or httpx.Client()

    @classmethod
    def from_settings(cls, settings: Settings, *, http_client: httpx.Client | None = None) -> MailerLiteClient:
        """Build a client from application settings; the API key must be configured."""

        return cls(
            settings.mailerlite_api_key or "",
            base_url=settings.mailerlite_base_url,
            timeout=settings.mailerlite_timeout_seconds,
            validation_timeout=settings.mailerlite_validation_timeout_seconds,
            http_client=http_client,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> MailerLiteClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        if json is not None:
            headers["Content-Type"] = "application/json"
        try:
            return self._http.request(
                method,
                f"{self._base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=timeout or self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.error("MailerLite request failed", extra={"method": method, "path": path, "reason": str(exc)})
            raise MailerLiteError(
                MailerLiteErrorKind.UPSTREAM_UNAVAILABLE,
                UNAVAILABLE_MESSAGE,
            ) from exc

    def _raise_for_status(
        self,
        response: httpx.Response,
        *,
        not_found: str | None = None,
        unprocessable: tuple[MailerLiteErrorKind, str] | None = None,
    ) -> None:
        """Translate an error response into a :class:`MailerLiteError`."""

        if response.is_success:
            return

        status_code = response.status_code
        remote_message = _remote_message(response)
        logger.error(
            "MailerLite API error",
            extra={"status_code": status_code, "error_message": remote_message, "url": str(response.request.url)},
        )

        if status_code == 401:
            raise MailerLiteError(MailerLiteErrorKind.INVALID_API_KEY, INVALID_API_KEY_MESSAGE, status_code)
        if status_code == 429:
            raise MailerLiteError(MailerLiteErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, status_code)
        if status_code == 404 and not_found is not None:
            raise MailerLiteError(MailerLiteErrorKind.NOT_FOUND, not_found, status_code)
        if status_code == 422 and unprocessable is not None:
            kind, message = unprocessable
            raise MailerLiteError(kind, message, status_code)
        if status_code >= 500:
            raise MailerLiteError(MailerLiteErrorKind.UPSTREAM_UNAVAILABLE, UNAVAILABLE_MESSAGE, status_code)
        raise MailerLiteError(MailerLiteErrorKind.API_ERROR, f"MailerLite API error: {remote_message}", status_code)

    @staticmethod
    def _json_data(response: httpx.Response) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MailerLiteError(
                MailerLiteErrorKind.UNEXPECTED,
                "Invalid response from MailerLite API",
                response.status_code,
            ) from exc
        if not isinstance(payload, dict) or "data" not in payload:
            raise MailerLiteError(
                MailerLiteErrorKind.UNEXPECTED,
                "Invalid response from MailerLite API",
                response.status_code,
            )
        return payload["data"]

    # Subscribers

    def create_subscriber(self, request: RegistrationRequest) -> str:
        """Create (or upsert) a subscriber and return its MailerLite id.

        Group names in ``request.groups`` are resolved to ids first.
        """

        logger.info("Creating MailerLite subscriber", extra={"email": request.email})

        custom_fields: dict[str, Any] = dict(request.custom_fields or {})
        if request.first_name:
            custom_fields["first_name"] = request.first_name
        if request.last_name:
            custom_fields["last_name"] = request.last_name

        body: dict[str, Any] = {"email": request.email, "fields": custom_fields}
        if request.groups:
            body["groups"] = self.convert_group_names_to_ids(request.groups)
        if isinstance(request, SubscriptionRequest):
            if request.status:
                body["status"] = request.status
            if request.subscribed_at:
                body["subscribed_at"] = request.subscribed_at
            if request.ip_address is not None:
                body["ip_address"] = str(request.ip_address)

        response = self._request("POST", "/subscribers", json=body)
        self._raise_for_status(
            response,
            unprocessable=(
                MailerLiteErrorKind.INVALID_DATA,
                "Invalid data provided or subscriber already exists",
            ),
        )
        subscriber = Subscriber.model_validate(self._json_data(response))

        logger.info(
            "Successfully created MailerLite subscriber",
            extra={"subscriber_id": subscriber.id, "email": request.email},
        )
        return subscriber.id

    def update_subscriber(self, subscriber_id: str, data: dict[str, Any]) -> None:
        """Apply a partial update (status, fields, timestamps) to an existing subscriber."""

        logger.info("Updating MailerLite subscriber", extra={"subscriber_id": subscriber_id})
        response = self._request("PUT", f"/subscribers/{subscriber_id}", json=data)
        self._raise_for_status(
            response,
            not_found="Subscriber not found",
            unprocessable=(MailerLiteErrorKind.INVALID_DATA, "Invalid data provided for subscriber update"),
        )

    def update_subscriber_fields(self, subscriber_id: str, fields: dict[str, Any]) -> None:
        self.update_subscriber(subscriber_id, {"fields": fields})

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        """Return the subscriber registered under ``email``, or None when there is none."""

        response = self._request("GET", "/subscribers", params={"filter[email]": email, "limit": 1})
        if response.status_code == 404:
            return None
        self._raise_for_status(response)

        data = self._json_data(response)
        items = data if isinstance(data, list) else [data]
        for item in items:
            if isinstance(item, dict) and str(item.get("email", "")).lower() == email.lower():
                return Subscriber.model_validate(item)
        return None

    # Groups

    def get_groups(self, name: str | None = None) -> list[Group]:
        """List groups, optionally narrowed by MailerLite's partial name filter."""

        params = {"filter[name]": name} if name else None
        response = self._request("GET", "/groups", params=params)
        self._raise_for_status(response)
        return [Group.model_validate(item) for item in self._json_data(response) or []]

    def get_group_by_name(self, name: str) -> Group | None:
        """Return the group whose name matches ``name`` case-insensitively, if any."""

        wanted = name.strip().lower()
        for group in self.get_groups(name=name):
            if group.name.strip().lower() == wanted:
                return group
        return None

    def add_subscriber_to_group(self, subscriber_id: str, group_id: str) -> None:
        """Assign a subscriber to a group.

        A 422 means the subscriber is already a member; it is raised as
        ``ALREADY_IN_GROUP`` so callers can treat it as success.
        """

        logger.info(
            "Adding subscriber to MailerLite group",
            extra={"subscriber_id": subscriber_id, "group_id": group_id},
        )
        response = self._request("POST", f"/subscribers/{subscriber_id}/groups/{group_id}")
        self._raise_for_status(
            response,
            not_found="Subscriber or group not found",
            unprocessable=(
                MailerLiteErrorKind.ALREADY_IN_GROUP,
                "Subscriber is already in the group or invalid data provided",
            ),
        )

    def convert_group_names_to_ids(self, groups: Iterable[str]) -> list[str]:
        """Resolve group names to ids, passing numeric ids through untouched.

        The group list is fetched at most once. Every unmatched name is
        reported together in a single ``GROUPS_NOT_FOUND`` error.
        """

        tokens = [token.strip() for token in groups]
        if not tokens:
            return []
        if all(_is_group_id(token) for token in tokens):
            return tokens

        by_name = {group.name.strip().lower(): group.id for group in self.get_groups()}

        resolved: list[str] = []
        missing: list[str] = []
        for token in tokens:
            if _is_group_id(token):
                resolved.append(token)
            elif token.lower() in by_name:
                resolved.append(by_name[token.lower()])
            else:
                missing.append(token)

        if missing:
            raise MailerLiteError(
                MailerLiteErrorKind.GROUPS_NOT_FOUND,
                f"Groups not found: {', '.join(missing)}",
            )
        return resolved

    def validate_api_key(self) -> bool:
        """Return True when MailerLite accepts the configured API key."""

        try:
            response = self._request("GET", "/me", timeout=self._validation_timeout)
            self._raise_for_status(response)
        except MailerLiteError as exc:
            logger.error("MailerLite API key validation failed", extra={"reason": exc.message})
            return False
        return True
