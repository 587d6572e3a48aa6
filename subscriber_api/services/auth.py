"""Bearer token extraction and shared-secret JWT verification."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

BEARER_TOKEN_REGEX = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)
EMPTY_BEARER_REGEX = re.compile(r"^Bearer\s*$", re.IGNORECASE)


def extract_token(auth_header: str | None) -> str | None:
    """Pull the token out of an ``Authorization`` header value.

    ``"Bearer abc"`` and ``"bearer abc"`` yield ``"abc"``; a bare ``"Bearer "``
    yields ``""``; a header without the prefix is treated as the token itself.
    """

    if not auth_header:
        return None

    match = BEARER_TOKEN_REGEX.match(auth_header)
    if match:
        return match.group(1)

    if EMPTY_BEARER_REGEX.match(auth_header):
        return ""

    return auth_header


def verify_token(token: str, secret: str | None) -> bool:
    """Return True when ``token`` is a valid, unexpired HS256 JWT signed with ``secret``."""

    if not secret:
        logger.error("JWT secret is not configured")
        return False

    try:
        jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.warning("JWT token verification failed", extra={"reason": str(exc)})
        return False

    logger.info("JWT token verification successful")
    return True


def issue_token(
    secret: str,
    claims: dict[str, Any] | None = None,
    *,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """Sign a token accepted by :func:`verify_token` (local development and tests)."""

    issued_at = datetime.now(timezone.utc)
    payload = {**(claims or {}), "iat": issued_at, "exp": issued_at + expires_in}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)
