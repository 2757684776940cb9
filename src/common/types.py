"""Common types."""

from django.http import HttpRequest as DjangoHttpRequest

from accounts.jwt import AccessTokenPayload
from accounts.models import AdminUser


class HttpRequest(DjangoHttpRequest):
    user: AdminUser
    auth_token: str
    token_payload: AccessTokenPayload
