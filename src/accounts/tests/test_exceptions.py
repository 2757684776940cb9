"""Tests for where login errors sit in the service error taxonomy."""

import pytest

from accounts.exceptions import (
    InvalidCredentialsError,
    InvalidOtpError,
    InvalidTokenError,
    OtpExpiredError,
    SessionRevokedError,
)
from common.exceptions import AuthError


@pytest.mark.parametrize(
    "error,status_code",
    [
        (InvalidOtpError, 400),
        (OtpExpiredError, 400),
        (InvalidCredentialsError, 401),
        (InvalidTokenError, 401),
        (SessionRevokedError, 401),
    ],
)
def test_login_failures_are_auth_errors(error: type[AuthError], status_code: int) -> None:
    raised = error()

    assert isinstance(raised, AuthError)
    assert raised.status_code == status_code
