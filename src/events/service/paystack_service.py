"""Paystack client.

Only the two calls needed for a hosted checkout are implemented: initializing a
transaction and verifying it by reference. Amounts are sent in minor units (kobo).
"""

import typing as t
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache

import httpx
import structlog
from django.conf import settings
from pydantic import BaseModel, ConfigDict, ValidationError

from events.exceptions import PaymentGatewayError

logger = structlog.get_logger(__name__)


class InitializedPayment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    authorization_url: str
    access_code: str = ""
    reference: str = ""


class VerifiedPayment(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    status: str
    id: str
    reference: str = ""
    amount: int | None = None

    @property
    def is_successful(self) -> bool:
        return self.status == "success"


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to the integer minor units Paystack expects."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaystackGateway:
    """Thin wrapper around the Paystack transaction API.

    Holds one pooled httpx client, opened on first use and released by ``close``.
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        """Initialize the gateway.

        Args:
            client: A preconfigured httpx client. Built from settings when omitted.
        """
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=settings.PAYSTACK_BASE_URL,
                headers={"Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}"},
                timeout=httpx.Timeout(settings.PAYSTACK_TIMEOUT_SECONDS, connect=10.0),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client and release its connections."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "PaystackGateway":
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: t.Any) -> dict[str, t.Any]:
        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error("paystack_request_error", url=url, error=str(e))
            raise PaymentGatewayError() from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("status"):
            logger.warning(
                "paystack_request_failed",
                url=url,
                status=response.status_code,
                message=body.get("message"),
            )
            raise PaymentGatewayError()
        return t.cast(dict[str, t.Any], body.get("data") or {})

    def initialize(
        self,
        *,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: dict[str, t.Any],
        callback_url: str | None = None,
    ) -> InitializedPayment:
        """Start a hosted checkout and return where to send the buyer."""
        payload = {
            "email": email,
            "amount": to_minor_units(amount),
            "reference": reference,
            "metadata": metadata,
            "callback_url": callback_url or settings.PAYSTACK_CALLBACK_URL,
        }
        data = self._request("POST", "/transaction/initialize", json=payload)
        try:
            result = InitializedPayment.model_validate(data)
        except ValidationError as e:
            logger.warning("paystack_initialize_unexpected_response", reference=reference)
            raise PaymentGatewayError() from e
        logger.info("paystack_transaction_initialized", reference=reference)
        return result

    def verify(self, reference: str) -> VerifiedPayment:
        """Look up the outcome of a checkout by its reference."""
        data = self._request("GET", f"/transaction/verify/{reference}")
        try:
            result = VerifiedPayment.model_validate(data)
        except ValidationError as e:
            logger.warning("paystack_verify_unexpected_response", reference=reference)
            raise PaymentGatewayError() from e
        logger.info("paystack_transaction_verified", reference=reference, status=result.status)
        return result


@lru_cache(maxsize=1)
def get_paystack_gateway() -> PaystackGateway:
    """The process-wide gateway; every request shares its connection pool."""
    return PaystackGateway()
