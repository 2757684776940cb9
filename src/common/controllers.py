import typing as t

from ninja_extra import ControllerBase

from accounts.models import AdminUser
from common.types import HttpRequest


class AdminAwareController(ControllerBase):
    def request(self) -> HttpRequest:
        return t.cast(HttpRequest, self.context.request)  # type: ignore[union-attr]

    def user(self) -> AdminUser:
        """Get the admin for this request."""
        return self.request().user

    def token(self) -> str:
        """Get the bearer token this request was authenticated with."""
        return self.request().auth_token
