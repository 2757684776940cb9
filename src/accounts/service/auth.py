"""Authentication service layer."""

import secrets

import structlog
from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import IntegrityError, transaction
from django.http import HttpRequest
from django.utils import timezone

from accounts import schema
from accounts.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOtpError,
    OtpExpiredError,
    TooManyRequestsError,
)
from accounts.jwt import create_access_token, create_refresh_token
from accounts.models import AdminUser, normalize_email
from accounts.service.sessions import SessionRegistry, get_session_registry
from accounts.tasks import send_otp_email

logger = structlog.get_logger(__name__)


def find_admin_by_email(email: str) -> AdminUser | None:
    """Look up an admin by email, ignoring case."""
    return AdminUser.objects.get_by_email(email)


def create_admin(payload: schema.CreateAdminSchema) -> AdminUser:
    """Register a new admin; the password is hashed before it is stored."""
    email = normalize_email(payload.email)
    if AdminUser.objects.filter(email=email).exists():
        logger.info("admin_create_duplicate_email", email=email)
        raise DuplicateEmailError()
    try:
        with transaction.atomic():
            admin = AdminUser.objects.create_user(
                email=email,
                password=payload.password,
                full_name=payload.full_name,
                brand_name=payload.brand_name,
                support_email=payload.support_email or "",
                phone_number=payload.phone_number,
            )
    except IntegrityError as e:
        logger.info("admin_create_duplicate_email", email=email)
        raise DuplicateEmailError() from e
    logger.info("admin_created", user_id=str(admin.id), email=admin.email)
    return admin


def _generate_otp() -> str:
    return "".join(secrets.choice("0123456789") for _ in range(settings.OTP_LENGTH))


def _issue_otp(admin: AdminUser) -> None:
    """Rotate the admin's OTP and send the plain code by email."""
    otp = _generate_otp()
    admin.otp = make_password(otp)
    admin.otp_expires_at = timezone.now() + settings.OTP_LIFETIME
    admin.otp_verified = False
    admin.save(update_fields=["otp", "otp_expires_at", "otp_verified"])
    send_otp_email.delay(admin.email, admin.full_name, otp)
    logger.info("otp_issued", user_id=str(admin.id), email=admin.email)


def begin_login(email: str, password: str) -> AdminUser:
    """Check the password and email an OTP; the login completes in ``verify_otp``."""
    admin = find_admin_by_email(email)
    if admin is None or not admin.is_active or not admin.check_password(password):
        logger.warning("login_failed", email=normalize_email(email))
        raise InvalidCredentialsError()
    _issue_otp(admin)
    return admin


@transaction.atomic
def verify_otp(email: str, otp: str) -> AdminUser:
    """Consume the pending OTP of an admin."""
    admin = AdminUser.objects.select_for_update().filter(email=normalize_email(email)).first()
    if admin is None or not admin.has_pending_otp:
        logger.warning("otp_verification_failure", email=normalize_email(email), reason="not_pending")
        raise InvalidOtpError()
    if admin.otp_is_expired():
        logger.warning("otp_verification_failure", user_id=str(admin.id), reason="expired")
        raise OtpExpiredError()
    if not check_password(otp, admin.otp):
        logger.warning("otp_verification_failure", user_id=str(admin.id), reason="mismatch")
        raise InvalidOtpError()

    admin.clear_otp()
    admin.otp_verified = True
    admin.last_login = timezone.now()
    admin.save(update_fields=["otp", "otp_expires_at", "otp_verified", "last_login"])
    logger.info("otp_verification_success", user_id=str(admin.id), email=admin.email)
    return admin


def resend_otp(email: str) -> None:
    """Send a fresh OTP unless the previous one is still valid.

    Unknown emails are accepted silently so the endpoint cannot be used to discover which accounts exist.
    """
    admin = find_admin_by_email(email)
    if admin is None:
        logger.info("otp_resend_unknown_email", email=normalize_email(email))
        return
    if not admin.otp_is_expired():
        logger.info("otp_resend_throttled", user_id=str(admin.id))
        raise TooManyRequestsError()
    _issue_otp(admin)


def issue_login(
    admin: AdminUser, request: HttpRequest, registry: SessionRegistry | None = None
) -> schema.LoginResponseSchema:
    """Mint the token pair for a verified admin and register the login as a session."""
    registry = registry or get_session_registry()
    token = create_access_token(admin.id, admin.email)
    refresh_token = create_refresh_token(admin.id, admin.email)
    session = registry.create_session(admin.id, admin.email, token, request)
    logger.info("token_pair_generated", user_id=str(admin.id), email=admin.email)
    return schema.LoginResponseSchema(
        message="Login successful.",
        token=token,
        refresh_token=refresh_token,
        session=schema.SessionSchema.from_orm(session),
        admin=schema.AdminUserSchema.from_orm(admin),
    )
