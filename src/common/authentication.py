"""Bearer authentication bound to the login session registry.

A token is accepted only while its signature and expiry are valid and a live session
references it. Tokens verified against the registry are remembered by this process for
``VERIFIED_TOKEN_CACHE_SECONDS`` (never past their own expiry), so a revocation made on
another instance is honoured here after at most that window.
"""

import hashlib
import typing as t

import structlog
from django.conf import settings
from django.core.cache import caches
from django.http import HttpRequest
from django.utils import timezone
from ninja.security import HttpBearer

from accounts.exceptions import InvalidTokenError, SessionRevokedError
from accounts.jwt import AccessTokenPayload, decode_unverified, validate_access_token
from accounts.models import AdminUser
from accounts.service.sessions import get_session_registry
from common.exceptions import AuthError

logger = structlog.get_logger(__name__)

VERIFIED_TOKENS_CACHE = "verified_tokens"


def _cache_key(token: str) -> str:
    return "verified:" + hashlib.sha256(token.encode()).hexdigest()


def remember_verified_token(token: str, payload: AccessTokenPayload) -> None:
    """Trust ``token`` locally for a short while."""
    remaining = int((payload.exp - timezone.now()).total_seconds())
    timeout = min(settings.VERIFIED_TOKEN_CACHE_SECONDS, remaining)
    if timeout > 0:
        caches[VERIFIED_TOKENS_CACHE].set(_cache_key(token), str(payload.user_id), timeout=timeout)


def is_verified_token(token: str) -> bool:
    return caches[VERIFIED_TOKENS_CACHE].get(_cache_key(token)) is not None


def forget_verified_token(*tokens: str) -> None:
    """Drop tokens from this process' verified-token cache."""
    caches[VERIFIED_TOKENS_CACHE].delete_many([_cache_key(token) for token in tokens])


class SessionJWTAuth(HttpBearer):
    """Authenticate admins by access token and live session."""

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Reject requests without a bearer token with an explicit message."""
        auth_value = request.headers.get(self.header, "")
        parts = auth_value.split(" ")
        if len(parts) < 2 or parts[0].lower() != self.openapi_scheme or not parts[1].strip():
            raise AuthError("Access token is required.")
        return self.authenticate(request, " ".join(parts[1:]).strip())

    def authenticate(self, request: HttpRequest, token: str) -> AdminUser:
        """Resolve the admin behind ``token``.

        Raises:
            TokenExpiredError: The token is past its expiry.
            InvalidTokenError: The token is malformed, forged or its admin is gone.
            SessionRevokedError: No live session references the token.
        """
        if is_verified_token(token):
            payload = decode_unverified(token)
        else:
            payload = validate_access_token(token)
            if not get_session_registry().verify_and_touch(payload.user_id, token):
                logger.info("session_not_found", user_id=str(payload.user_id))
                raise SessionRevokedError()
            remember_verified_token(token, payload)

        user = AdminUser.objects.filter(id=payload.user_id, is_active=True).first()
        if user is None:
            forget_verified_token(token)
            raise InvalidTokenError()

        request.user = user
        request.auth_token = token  # type: ignore[attr-defined]
        request.token_payload = payload  # type: ignore[attr-defined]
        return user
