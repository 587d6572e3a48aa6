from datetime import timedelta

import jwt
import pytest

from subscriber_api.services import auth

SECRET = "auth-test-secret-long-enough-for-hs256-keys"


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
        ("BEARER abc", "abc"),
        ("Bearer   abc123xyz", "abc123xyz"),
        ("Bearer ", ""),
        ("Bearer", ""),
        ("abc", "abc"),
        (None, None),
        ("", None),
    ],
)
def test_extract_token(header: str | None, expected: str | None) -> None:
    assert auth.extract_token(header) == expected


def test_verify_token_accepts_signed_token() -> None:
    token = auth.issue_token(SECRET, {"userId": "123"})
    assert auth.verify_token(token, SECRET) is True


def test_verify_token_fails_closed_without_secret() -> None:
    token = auth.issue_token(SECRET)
    assert auth.verify_token(token, None) is False
    assert auth.verify_token(token, "") is False


def test_verify_token_rejects_wrong_secret() -> None:
    token = auth.issue_token(SECRET)
    assert auth.verify_token(token, "another-secret-that-is-also-long-enough") is False


def test_verify_token_rejects_expired_token() -> None:
    token = auth.issue_token(SECRET, expires_in=timedelta(seconds=-30))
    assert auth.verify_token(token, SECRET) is False


def test_verify_token_rejects_garbage() -> None:
    assert auth.verify_token("not-a-jwt", SECRET) is False


def test_issue_token_sets_expiry() -> None:
    token = auth.issue_token(SECRET, {"role": "user"}, expires_in=timedelta(minutes=5))
    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 300
