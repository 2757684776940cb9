"""
This conftest.py provides fixtures shared by every app's tests.
"""

import typing as t
from datetime import datetime, timedelta
from decimal import Decimal

import fakeredis
import faker
import pytest
from django.core.cache import caches
from django.test import RequestFactory
from django.test.client import Client
from django.utils import timezone
from pytest import MonkeyPatch

from accounts.models import AdminUser
from accounts.schema import LoginResponseSchema
from accounts.service import auth as auth_service
from accounts.service.sessions import SessionRegistry
from events.models import Event, TicketTier

ADMIN_PASSWORD = "a-Strong-password-123!"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class MockRecord:
    """A mock representation of an IP2Location record."""

    country_short: str = "NG"
    country_long: str = "Nigeria"
    region: str = "Lagos"
    city: str = "Lagos"
    timezone: str = "+01:00"


class MockIP2Location:
    """A mock IP2Location object."""

    def get_all(self, ip: str) -> MockRecord | None:
        """
        Returns a MockRecord for any given IP, or None if the IP is empty.
        """
        if not ip:
            return None
        return MockRecord()


@pytest.fixture(autouse=True)
def mock_ip2location(monkeypatch: MonkeyPatch) -> None:
    """
    Mocks the IP2Location database lookup to avoid dependency on the .BIN file.
    This fixture is autouse=True, so it will be active for all tests.
    """

    def mock_get_ip2location() -> MockIP2Location:
        return MockIP2Location()

    monkeypatch.setattr("geo.ip2.get_ip2location", mock_get_ip2location)


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits and start every test with an empty throttle history."""
    for throttle in ("AuthThrottle", "PaymentThrottle", "AnonDefaultThrottle", "UserDefaultThrottle", "WriteThrottle"):
        monkeypatch.setattr(f"common.throttling.{throttle}.rate", "1000/min")
    caches["default"].clear()


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def fast_password_hashing(settings: t.Any) -> None:
    """bcrypt is deliberately slow; tests do not need it."""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch: MonkeyPatch) -> fakeredis.FakeRedis:
    """Back the session registry with an in-memory Redis, fresh for each test."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    monkeypatch.setattr("accounts.service.sessions.get_redis_client", lambda: client)
    return client


@pytest.fixture(autouse=True)
def clear_verified_tokens() -> t.Iterator[None]:
    """Tokens verified in one test must not be trusted in the next."""
    caches["verified_tokens"].clear()
    yield
    caches["verified_tokens"].clear()


@pytest.fixture
def session_registry(fake_redis: fakeredis.FakeRedis) -> SessionRegistry:
    return SessionRegistry(client=fake_redis, expiry=timedelta(days=7))


class AdminUserFactory:
    """Factory for creating AdminUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> AdminUser:
        email = kwargs.pop("email", self.fake.unique.email())
        password = kwargs.pop("password", ADMIN_PASSWORD)
        full_name = kwargs.pop("full_name", self.fake.name())
        brand_name = kwargs.pop("brand_name", self.fake.company())
        phone_number = kwargs.pop("phone_number", "+2348012345678")
        return AdminUser.objects.create_user(
            email=email,
            password=password,
            full_name=full_name,
            brand_name=brand_name,
            phone_number=phone_number,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> AdminUser:
        return self.create_user(**kwargs)


@pytest.fixture
def admin_user_factory() -> AdminUserFactory:
    return AdminUserFactory()


@pytest.fixture
def admin_user(admin_user_factory: AdminUserFactory) -> AdminUser:
    """An active admin with a known password."""
    return admin_user_factory(email="organizer@example.com", full_name="Ada Organizer")


@pytest.fixture
def login_request(rf: RequestFactory) -> t.Any:
    """A request as it reaches the login endpoint from a desktop browser."""
    return rf.post("/api/auth/verify-otp", HTTP_USER_AGENT=BROWSER_USER_AGENT, REMOTE_ADDR="102.89.34.10")


@pytest.fixture
def admin_login(admin_user: AdminUser, login_request: t.Any) -> LoginResponseSchema:
    """A completed login for ``admin_user``, with its session registered."""
    return auth_service.issue_login(admin_user, login_request)


@pytest.fixture
def auth_client(admin_login: LoginResponseSchema) -> Client:
    """A client presenting the access token of ``admin_login``."""
    return Client(HTTP_AUTHORIZATION=f"Bearer {admin_login.token}")


@pytest.fixture
def next_week() -> datetime:
    return timezone.now() + timedelta(days=7)


@pytest.fixture
def event(next_week: datetime) -> Event:
    return Event.objects.create(
        title="Afrobeats Live",
        theme="Summer Nights",
        venue="Eko Convention Centre",
        address="Plot 1415 Adetokunbo Ademola Street, Victoria Island, Lagos",
        start=next_week,
        end=next_week + timedelta(hours=5),
        published=True,
    )


@pytest.fixture
def ticket_tier(event: Event) -> TicketTier:
    return TicketTier.objects.create(
        event=event,
        name="Regular",
        price=Decimal("5000.00"),
        currency="NGN",
        initial_quantity=100,
        available_quantity=100,
        benefits=["Entry", "Free drink"],
    )
