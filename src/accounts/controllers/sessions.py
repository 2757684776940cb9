import structlog
from ninja_extra import api_controller, route

from accounts import schema
from accounts.service.sessions import get_session_registry
from common.authentication import SessionJWTAuth, forget_verified_token
from common.controllers import AdminAwareController
from common.exceptions import NotFoundError
from common.schema import ResponseMessage
from common.throttling import UserDefaultThrottle

logger = structlog.get_logger(__name__)


@api_controller("/auth/sessions", tags=["Sessions"], auth=SessionJWTAuth(), throttle=UserDefaultThrottle())
class SessionController(AdminAwareController):
    @route.get("/", response=list[schema.SessionSchema], url_name="list_sessions")
    def list_sessions(self) -> list[schema.SessionData]:
        """List the caller's live sessions, most recently active first.

        The session used by this request is flagged with `is_current`.
        """
        return get_session_registry().list_sessions(self.user().id, current_token=self.token())

    @route.get("/count", response=schema.SessionCountSchema, url_name="count_sessions")
    def count_sessions(self) -> schema.SessionCountSchema:
        """Number of live sessions of the caller."""
        return schema.SessionCountSchema(active_sessions=get_session_registry().count_active(self.user().id))

    @route.delete("/", response=ResponseMessage, url_name="revoke_current_session")
    def revoke_current_session(self) -> ResponseMessage:
        """Revoke the session of the calling token."""
        get_session_registry().revoke(self.user().id, self.token())
        forget_verified_token(self.token())
        return ResponseMessage(message="Session revoked.")

    @route.delete("/others", response=schema.RevokedSessionsSchema, url_name="revoke_other_sessions")
    def revoke_other_sessions(self) -> schema.RevokedSessionsSchema:
        """Revoke every session of the caller except the current one."""
        registry = get_session_registry()
        current = self.token()
        stale_tokens = [token for token in registry.tokens(self.user().id) if token != current]
        revoked = registry.revoke_all_others(self.user().id, current)
        if stale_tokens:
            forget_verified_token(*stale_tokens)
        return schema.RevokedSessionsSchema(message="Other sessions revoked.", revoked=revoked)

    @route.delete("/all", response=schema.RevokedSessionsSchema, url_name="revoke_all_sessions")
    def revoke_all_sessions(self) -> schema.RevokedSessionsSchema:
        """Revoke every session of the caller, including the current one."""
        registry = get_session_registry()
        tokens = registry.tokens(self.user().id)
        revoked = registry.revoke_all(self.user().id)
        forget_verified_token(self.token(), *tokens)
        return schema.RevokedSessionsSchema(message="All sessions revoked.", revoked=revoked)

    @route.delete("/{session_id}", response=ResponseMessage, url_name="revoke_session")
    def revoke_session(self, session_id: str) -> ResponseMessage:
        """Revoke one of the caller's sessions by its `session_id`."""
        session = get_session_registry().revoke_session_id(self.user().id, session_id)
        if session is None:
            raise NotFoundError("Session not found.")
        forget_verified_token(session.token)
        logger.info("session_revoked_by_id", user_id=str(self.user().id), session_id=session_id)
        return ResponseMessage(message="Session revoked.")
