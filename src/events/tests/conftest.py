import typing as t
from decimal import Decimal
from unittest.mock import MagicMock

import httpx
import orjson
import pytest
from pytest import MonkeyPatch

from events.models import Event, TicketTier
from events.schema import BuyerInSchema
from events.service.payment_service import PaymentService
from events.service.paystack_service import PaystackGateway

PAYSTACK_BASE_URL = "https://api.paystack.co"


class FakePaystack:
    """Answers like the Paystack transaction API and records what it was sent."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.verify_status = "success"
        self.fail_initialize = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/transaction/initialize":
            if self.fail_initialize:
                return httpx.Response(401, json={"status": False, "message": "Invalid key"})
            body = orjson.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Authorization URL created",
                    "data": {
                        "authorization_url": f"https://checkout.paystack.com/{body['reference']}",
                        "access_code": "0peioxfhpn",
                        "reference": body["reference"],
                    },
                },
            )
        if request.url.path.startswith("/transaction/verify/"):
            reference = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Verification successful",
                    "data": {"id": 4099260516, "status": self.verify_status, "reference": reference, "amount": 1000000},
                },
            )
        return httpx.Response(404, json={"status": False, "message": "Not found"})

    def sent_json(self, index: int = 0) -> dict[str, t.Any]:
        return t.cast(dict[str, t.Any], orjson.loads(self.requests[index].content))


@pytest.fixture
def fake_paystack() -> FakePaystack:
    return FakePaystack()


@pytest.fixture
def paystack_gateway(fake_paystack: FakePaystack) -> PaystackGateway:
    client = httpx.Client(
        transport=httpx.MockTransport(fake_paystack),
        base_url=PAYSTACK_BASE_URL,
        headers={"Authorization": "Bearer sk_test_xxx"},
    )
    return PaystackGateway(client=client)


@pytest.fixture
def payment_service(paystack_gateway: PaystackGateway) -> PaymentService:
    return PaymentService(gateway=paystack_gateway)


@pytest.fixture(autouse=True)
def use_fake_gateway(monkeypatch: MonkeyPatch, paystack_gateway: PaystackGateway) -> None:
    """Endpoints build their payment service from this gateway."""
    monkeypatch.setattr("events.service.payment_service.get_paystack_gateway", lambda: paystack_gateway)


@pytest.fixture(autouse=True)
def mock_ticket_email(monkeypatch: MonkeyPatch) -> MagicMock:
    """Ticket emails render a PDF; only the dispatch is of interest here."""
    mock = MagicMock()
    monkeypatch.setattr("events.service.payment_service.send_ticket_email", mock)
    return mock


@pytest.fixture
def vip_tier(event: Event) -> TicketTier:
    return TicketTier.objects.create(
        event=event,
        name="VIP",
        price=Decimal("25000.00"),
        currency="NGN",
        initial_quantity=2,
        available_quantity=2,
        benefits=["Backstage access"],
    )


@pytest.fixture
def buyers() -> list[BuyerInSchema]:
    """One buyer taking two tickets."""
    return [
        BuyerInSchema(full_name="Kemi Adeyemi", email="Kemi@Example.com", phone_number="+2348055555555", quantity=2),
    ]
