"""Tests for the Paystack client."""

import typing as t
from decimal import Decimal

import httpx
import pytest

from events.exceptions import PaymentGatewayError
from events.service.paystack_service import PaystackGateway, get_paystack_gateway, to_minor_units
from events.tests.conftest import PAYSTACK_BASE_URL, FakePaystack


def _gateway(handler: t.Callable[[httpx.Request], httpx.Response]) -> PaystackGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler), base_url=PAYSTACK_BASE_URL)
    return PaystackGateway(client=client)


@pytest.mark.parametrize(
    "amount,expected",
    [(Decimal("5000"), 500_000), (Decimal("1234.56"), 123_456), (Decimal("0.005"), 1), (Decimal("0"), 0)],
)
def test_to_minor_units(amount: Decimal, expected: int) -> None:
    assert to_minor_units(amount) == expected


def test_initialize(paystack_gateway: PaystackGateway, fake_paystack: FakePaystack) -> None:
    result = paystack_gateway.initialize(
        email="kemi@example.com",
        amount=Decimal("10000"),
        reference="a1b2c3d4e5f6",
        metadata={"txn_id": "TXN-a1b2c3d4e5f6"},
        callback_url="https://tickets.example.com/payment-success",
    )

    assert result.authorization_url == "https://checkout.paystack.com/a1b2c3d4e5f6"
    request = fake_paystack.requests[0]
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer sk_test_xxx"
    assert fake_paystack.sent_json() == {
        "email": "kemi@example.com",
        "amount": 1_000_000,
        "reference": "a1b2c3d4e5f6",
        "metadata": {"txn_id": "TXN-a1b2c3d4e5f6"},
        "callback_url": "https://tickets.example.com/payment-success",
    }


def test_verify(paystack_gateway: PaystackGateway, fake_paystack: FakePaystack) -> None:
    result = paystack_gateway.verify("a1b2c3d4e5f6")

    assert result.is_successful
    assert result.id == "4099260516"
    assert result.reference == "a1b2c3d4e5f6"
    assert fake_paystack.requests[0].url.path == "/transaction/verify/a1b2c3d4e5f6"


def test_verify_reports_unsuccessful_status(paystack_gateway: PaystackGateway, fake_paystack: FakePaystack) -> None:
    fake_paystack.verify_status = "abandoned"

    result = paystack_gateway.verify("a1b2c3d4e5f6")

    assert not result.is_successful


def test_http_error(paystack_gateway: PaystackGateway, fake_paystack: FakePaystack) -> None:
    fake_paystack.fail_initialize = True

    with pytest.raises(PaymentGatewayError):
        paystack_gateway.initialize(email="kemi@example.com", amount=Decimal("1"), reference="ref", metadata={})


def test_false_status_in_ok_response() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json={"status": False, "message": "Transaction not found"}))

    with pytest.raises(PaymentGatewayError):
        gateway.verify("ref")


def test_non_json_response() -> None:
    gateway = _gateway(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(PaymentGatewayError):
        gateway.verify("ref")


def test_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PaymentGatewayError):
        _gateway(handler).verify("ref")


def test_unexpected_payload_shape() -> None:
    gateway = _gateway(lambda request: httpx.Response(200, json={"status": True, "data": {"access_code": "x"}}))

    with pytest.raises(PaymentGatewayError):
        gateway.initialize(email="kemi@example.com", amount=Decimal("1"), reference="ref", metadata={})


def test_close_releases_the_client(paystack_gateway: PaystackGateway) -> None:
    client = paystack_gateway._get_client()

    paystack_gateway.close()

    assert client.is_closed
    assert paystack_gateway._client is None


def test_context_manager_closes_the_client(fake_paystack: FakePaystack) -> None:
    with _gateway(fake_paystack) as gateway:
        gateway.verify("a1b2c3d4e5f6")
        client = gateway._client

    assert client is not None
    assert client.is_closed


def test_reopens_after_close(paystack_gateway: PaystackGateway) -> None:
    paystack_gateway.close()

    assert not paystack_gateway._get_client().is_closed
    paystack_gateway.close()


def test_shared_gateway_reuses_one_client() -> None:
    get_paystack_gateway.cache_clear()
    try:
        first, second = get_paystack_gateway(), get_paystack_gateway()

        assert first is second
        assert first._get_client() is second._get_client()
    finally:
        get_paystack_gateway().close()
        get_paystack_gateway.cache_clear()
