"""This module contains the controllers for the authentication app."""

import structlog
from ninja_extra import api_controller, route, status

from accounts import schema
from accounts.models import AdminUser
from accounts.service import auth as auth_service
from accounts.service.sessions import get_session_registry
from common.authentication import SessionJWTAuth, forget_verified_token
from common.controllers import AdminAwareController
from common.schema import ResponseMessage
from common.throttling import AuthThrottle

logger = structlog.get_logger(__name__)


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(AdminAwareController):
    @route.post(
        "/create-account",
        response={status.HTTP_201_CREATED: schema.AdminUserSchema},
        url_name="create_account",
    )
    def create_account(self, payload: schema.CreateAdminSchema) -> tuple[int, AdminUser]:
        """Register a new admin account.

        The email is stored lower-cased and must be unique regardless of case; a clash returns 409.
        """
        return status.HTTP_201_CREATED, auth_service.create_admin(payload)

    @route.post("/login", response=ResponseMessage, url_name="login")
    def login(self, payload: schema.LoginSchema) -> ResponseMessage:
        """Check email and password, then email a one-time code.

        Exchange the code for tokens via POST /auth/verify-otp. Any credential failure returns the
        same 401 message.
        """
        auth_service.begin_login(payload.email, payload.password)
        return ResponseMessage(message="OTP sent to your email.")

    @route.post("/verify-otp", response=schema.LoginResponseSchema, url_name="verify_otp")
    def verify_otp(self, payload: schema.VerifyOtpSchema) -> schema.LoginResponseSchema:
        """Complete the login with the emailed code and open a new session."""
        admin = auth_service.verify_otp(payload.email, payload.otp)
        return auth_service.issue_login(admin, self.context.request)  # type: ignore[arg-type]

    @route.post("/resend-otp", response=ResponseMessage, url_name="resend_otp")
    def resend_otp(self, payload: schema.EmailSchema) -> ResponseMessage:
        """Send a fresh code once the previous one has expired."""
        auth_service.resend_otp(payload.email)
        return ResponseMessage(message="If the account exists, a new OTP has been sent.")

    @route.post("/logout", response=ResponseMessage, auth=SessionJWTAuth(), url_name="logout")
    def logout(self) -> ResponseMessage:
        """Revoke the session of the calling token."""
        get_session_registry().revoke(self.user().id, self.token())
        forget_verified_token(self.token())
        logger.info("admin_logged_out", user_id=str(self.user().id))
        return ResponseMessage(message="Logged out successfully.")
