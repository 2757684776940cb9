"""Schema for accounts module."""

import datetime
import typing as t

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, field_validator, model_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from geo.schema import GeoLocation

from .models import AdminUser, normalize_email


class AdminUserSchema(ModelSchema):
    id: UUID4

    class Meta:
        model = AdminUser
        fields = [
            "id",
            "email",
            "full_name",
            "brand_name",
            "support_email",
            "phone_number",
            "two_factor_enabled",
            "date_joined",
        ]


class PasswordMixin(Schema):
    password: str = Field(..., description="Password", min_length=8, max_length=150)
    confirm_password: str = Field(..., description="Password confirmation", min_length=8, max_length=150)

    @model_validator(mode="after")
    def password_match(self) -> t.Self:
        """Validate that the passwords match."""
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class CreateAdminSchema(PasswordMixin):
    full_name: OneToTwoFiftyFiveString
    brand_name: OneToTwoFiftyFiveString
    email: EmailStr
    support_email: EmailStr | None = None
    phone_number: t.Annotated[StrippedString, Field(min_length=7, max_length=32)]

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)


class EmailSchema(Schema):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginSchema(EmailSchema):
    password: str = Field(..., max_length=150)


class VerifyOtpSchema(EmailSchema):
    otp: str = Field(..., description="The one-time code sent by email.", min_length=4, max_length=12)


class DeviceInfo(Schema):
    browser: str = "Unknown"
    os: str = "Unknown"
    device: str = "Unknown"


class SessionData(Schema):
    """A login session as stored in the session registry.

    ``session_id`` is the record key; ``is_current`` is derived per request and never stored.
    """

    session_id: str
    user_id: str
    email: str
    device_info: DeviceInfo
    location: GeoLocation
    ip_address: str
    login_time: datetime.datetime
    last_active: datetime.datetime
    token: str
    is_current: bool = False


class SessionSchema(Schema):
    """A login session as shown to its owner. The token itself is never exposed."""

    session_id: str
    device_info: DeviceInfo
    location: GeoLocation
    ip_address: str
    login_time: datetime.datetime
    last_active: datetime.datetime
    is_current: bool = False


class SessionCountSchema(Schema):
    active_sessions: int


class RevokedSessionsSchema(Schema):
    message: str
    revoked: int


class LoginResponseSchema(Schema):
    message: str
    token: str
    refresh_token: str
    session: SessionSchema
    admin: AdminUserSchema
