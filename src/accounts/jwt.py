"""The JWT module.

Access and refresh tokens are plain PyJWT tokens. A token is only honoured while a live
session in the session registry references it, so nothing is blacklisted here.
"""

import typing as t
from datetime import datetime, timedelta
from uuid import uuid4

import jwt
import structlog
from django.conf import settings
from django.utils import timezone
from jwt.exceptions import ExpiredSignatureError
from jwt.exceptions import InvalidTokenError as PyJWTInvalidTokenError
from pydantic import UUID4, BaseModel, ConfigDict, TypeAdapter, ValidationError, field_serializer

from accounts.exceptions import InvalidTokenError, TokenExpiredError

logger = structlog.get_logger(__name__)


class _BaseJWTPayload(BaseModel):
    """The base JWT payload."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)

    iss: str
    aud: str
    sub: str
    exp: datetime
    iat: datetime
    jti: str
    email: str
    user_id: UUID4

    @field_serializer("exp")
    def serialize_exp(self, value: datetime) -> int:
        return int(value.timestamp())

    @field_serializer("iat")
    def serialize_iat(self, value: datetime) -> int:
        return int(value.timestamp())


class AccessTokenPayload(_BaseJWTPayload):
    type: t.Literal["access"] = "access"


class RefreshTokenPayload(_BaseJWTPayload):
    type: t.Literal["refresh"] = "refresh"


def _build_payload(
    model: type[AccessTokenPayload] | type[RefreshTokenPayload], user_id: t.Any, email: str, lifetime: timedelta
) -> dict[str, t.Any]:
    now = timezone.now()
    payload = model(
        iss=settings.JWT_ISSUER,
        aud=settings.JWT_AUDIENCE,
        sub=str(user_id),
        user_id=user_id,
        email=email,
        iat=now,
        exp=now + lifetime,
        jti=uuid4().hex,
    )
    return payload.model_dump(mode="json")


def create_token(payload: dict[str, t.Any], secret: str, algorithm: str) -> str:
    """Helper function to create a JWT token.

    Args:
        payload (dict): The payload.
        secret (str): The secret key.
        algorithm (str): The algorithm.

    Returns:
        str: The JWT token.
    """
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(user_id: t.Any, email: str) -> str:
    """Mint an access token for an admin."""
    payload = _build_payload(AccessTokenPayload, user_id, email, settings.ACCESS_TOKEN_LIFETIME)
    return create_token(payload, settings.JWT_SIGNING_KEY, settings.JWT_ALGORITHM)


def create_refresh_token(user_id: t.Any, email: str) -> str:
    """Mint a refresh token, signed with its own key."""
    payload = _build_payload(RefreshTokenPayload, user_id, email, settings.REFRESH_TOKEN_LIFETIME)
    return create_token(payload, settings.JWT_REFRESH_SIGNING_KEY, settings.JWT_ALGORITHM)


def validate_access_token(
    token: str,
    key: str | None = None,
    audience: str | None = None,
    algorithms: list[str] | None = None,
) -> AccessTokenPayload:
    """Verify and parse an access token.

    Args:
        token (str): The JWT token.
        key (str): The secret key.
        audience (str): The audience.
        algorithms (list): The algorithms.

    Returns:
        AccessTokenPayload: The decoded JWT payload.

    Raises:
        TokenExpiredError: If the signature is valid but the token is past its ``exp``.
        InvalidTokenError: For any other verification or shape failure.
    """
    key = key or settings.JWT_SIGNING_KEY
    audience = audience or settings.JWT_AUDIENCE
    algorithms = algorithms or [settings.JWT_ALGORITHM]
    try:
        decoded_jwt = jwt.decode(
            token,
            key=key,
            audience=audience,
            issuer=settings.JWT_ISSUER,
            algorithms=algorithms,
        )
        return TypeAdapter(AccessTokenPayload).validate_python(decoded_jwt)
    except ExpiredSignatureError as e:
        logger.debug("token_has_expired")
        raise TokenExpiredError() from e
    except (PyJWTInvalidTokenError, ValidationError) as e:
        logger.debug("invalid_token", error=str(e))
        raise InvalidTokenError() from e


def decode_unverified(token: str) -> AccessTokenPayload:
    """Parse a token that was already verified by this process.

    Skips signature and expiry checks, so callers must only pass tokens taken from
    the verified-token cache.
    """
    try:
        decoded_jwt = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
        return TypeAdapter(AccessTokenPayload).validate_python(decoded_jwt)
    except (PyJWTInvalidTokenError, ValidationError) as e:
        raise InvalidTokenError() from e
