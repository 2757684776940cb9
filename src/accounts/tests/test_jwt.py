"""Tests for access and refresh token minting and validation."""

import uuid
from datetime import timedelta

import jwt
import pytest
from django.conf import settings
from django.utils import timezone
from freezegun import freeze_time

from accounts.exceptions import InvalidTokenError, TokenExpiredError
from accounts.jwt import create_access_token, create_refresh_token, decode_unverified, validate_access_token

USER_ID = uuid.uuid4()


def test_access_token_round_trip() -> None:
    token = create_access_token(USER_ID, "organizer@example.com")

    payload = validate_access_token(token)

    assert payload.user_id == USER_ID
    assert payload.sub == str(USER_ID)
    assert payload.email == "organizer@example.com"
    assert payload.type == "access"
    assert payload.iss == settings.JWT_ISSUER
    assert payload.aud == settings.JWT_AUDIENCE
    assert payload.exp - payload.iat == settings.ACCESS_TOKEN_LIFETIME


def test_every_token_has_a_unique_jti() -> None:
    first = validate_access_token(create_access_token(USER_ID, "organizer@example.com"))
    second = validate_access_token(create_access_token(USER_ID, "organizer@example.com"))

    assert first.jti != second.jti


def test_expired_token_reports_expiry() -> None:
    token = create_access_token(USER_ID, "organizer@example.com")

    with freeze_time(timezone.now() + settings.ACCESS_TOKEN_LIFETIME + timedelta(minutes=1)):
        with pytest.raises(TokenExpiredError) as exc_info:
            validate_access_token(token)

    assert exc_info.value.detail == "Token has expired."


def test_tampered_token_is_invalid() -> None:
    token = create_access_token(USER_ID, "organizer@example.com")
    forged = jwt.encode(jwt.decode(token, options={"verify_signature": False}), "not-the-key", algorithm="HS256")

    with pytest.raises(InvalidTokenError) as exc_info:
        validate_access_token(forged)

    assert exc_info.value.detail == "Invalid token."


def test_garbage_is_invalid() -> None:
    with pytest.raises(InvalidTokenError):
        validate_access_token("not-a-jwt")


def test_refresh_token_is_not_an_access_token() -> None:
    refresh = create_refresh_token(USER_ID, "organizer@example.com")

    with pytest.raises(InvalidTokenError):
        validate_access_token(refresh)

    claims = jwt.decode(
        refresh,
        settings.JWT_REFRESH_SIGNING_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )
    assert claims["type"] == "refresh"


def test_wrong_audience_is_invalid() -> None:
    token = create_access_token(USER_ID, "organizer@example.com")

    with pytest.raises(InvalidTokenError):
        validate_access_token(token, audience="someone-else")


def test_decode_unverified_skips_expiry() -> None:
    token = create_access_token(USER_ID, "organizer@example.com")

    with freeze_time(timezone.now() + settings.ACCESS_TOKEN_LIFETIME + timedelta(days=1)):
        payload = decode_unverified(token)

    assert payload.user_id == USER_ID
