from ninja_extra import status

from common.exceptions import AuthError, ConflictError, ServiceError


class InvalidCredentialsError(AuthError):
    """Raised when the email/password pair does not match an admin."""

    default_detail = "Email or password does not match."


class InvalidOtpError(AuthError):
    """Raised when the submitted OTP does not match, or none is pending."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid OTP."


class OtpExpiredError(AuthError):
    """Raised when the pending OTP is past its expiry."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "OTP has expired."


class TooManyRequestsError(ServiceError):
    """Raised when an OTP resend is requested while the previous one is still valid."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "An OTP was sent recently. Please wait before requesting a new one."


class DuplicateEmailError(ConflictError):
    """Raised when an admin with the same email already exists."""

    default_detail = "An account with this email already exists."


class TokenExpiredError(AuthError):
    default_detail = "Token has expired."


class InvalidTokenError(AuthError):
    default_detail = "Invalid token."


class SessionRevokedError(AuthError):
    default_detail = "Session expired or revoked."
