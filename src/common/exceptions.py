"""Service-level error taxonomy.

Every error raised by a service carries the HTTP status it maps to, so the API
layer can render it without knowing the concrete type.
"""

from ninja_extra import status


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed."

    def __init__(self, detail: str | None = None) -> None:
        """Store the human-readable reason."""
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(ServiceError):
    """An admin, event, ticket or transaction does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class ConflictError(ServiceError):
    """The request clashes with the current state of a resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."


class AuthError(ServiceError):
    """Bad credentials, bad OTP, or an unusable token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication failed."


class UpstreamError(ServiceError):
    """A collaborator (payment gateway, mail, storage) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream service error."


class InvariantViolation(ServiceError):
    """The operation would break a domain invariant."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid operation."
