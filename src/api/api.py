import redis
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from accounts.controllers.auth import AuthController
from accounts.controllers.sessions import SessionController
from accounts.service import sessions
from common.exceptions import ServiceError, UpstreamError
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.dashboard import DashboardController
from events.controllers.events import EventController
from events.controllers.payments import PaymentController
from events.controllers.transactions import TransactionController

from .exception_handlers import handle_django_validation_error, handle_general_exception, handle_service_error

logger = structlog.get_logger(__name__)

api = NinjaExtraAPI(
    title="Boxoffice API",
    docs_url="/docs",
    version=settings.VERSION,
    description="Ticket sales, Paystack checkout and door check-in for event organizers.",
    app_name=f"boxoffice-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Meta"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """The deployed API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Meta"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Report healthy only while the session store answers, since no login can be checked without it."""
    try:
        sessions.get_redis_client().ping()
    except redis.RedisError as exc:
        logger.error("healthcheck_session_store_unreachable", error=str(exc))
        raise UpstreamError("Session store unavailable.") from exc
    return 200, ResponseOk()


api.register_controllers(
    AuthController,
    SessionController,
    EventController,
    PaymentController,
    TransactionController,
    DashboardController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    ServiceError: handle_service_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
