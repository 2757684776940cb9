"""Ticket purchases: the transaction ledger and its payment state machine.

A transaction is created ``pending`` when checkout starts and moves exactly once to
``completed`` or ``failed`` when the gateway reports back. Only completed transactions can
be checked in, one buyer at a time, and each buyer only once.
"""

from decimal import Decimal
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from events.exceptions import (
    AlreadyCheckedInError,
    AmountMismatchError,
    EventNotFoundError,
    InvalidTransactionError,
    PaymentFailedError,
    PaymentGatewayError,
    PaymentIncompleteError,
    TicketCodeExhaustedError,
    TicketNotFoundError,
    TransactionNotFoundError,
)
from events.filters import TransactionFilterSchema
from events.models import Buyer, Event, TicketTier, Transaction
from events.models.transaction import generate_reference, generate_ticket_code, txn_id_for
from events.schema import (
    BuyerInSchema,
    PurchaseResponseSchema,
    TransactionSchema,
    VerificationResponseSchema,
    VerifiedEventSchema,
    VerifiedTicketSchema,
)
from events.service import dashboard_service, ticket_service
from events.service.paystack_service import PaystackGateway, get_paystack_gateway
from events.tasks import send_ticket_email
from events.utils import build_qr_payload, make_qr_data_url

logger = structlog.get_logger(__name__)


class PaymentService:
    def __init__(self, gateway: PaystackGateway) -> None:
        """Initialize the payment service."""
        self.gateway = gateway

    def _allocate_ticket_code(self, event_title: str, taken: set[str]) -> str:
        for _ in range(settings.TICKET_CODE_MAX_ATTEMPTS):
            code = generate_ticket_code(event_title)
            if code not in taken and not Buyer.objects.filter(ticket_code=code).exists():
                taken.add(code)
                return code
        logger.error("ticket_code_allocation_failed", event_title=event_title)
        raise TicketCodeExhaustedError()

    @transaction.atomic
    def _create_pending(
        self, event: Event, tier: TicketTier, buyers: list[BuyerInSchema], amount: Decimal
    ) -> Transaction:
        """Persist a pending transaction with one buyer per ticket unit."""
        reference = generate_reference()
        txn = Transaction.objects.create(
            txn_id=txn_id_for(reference),
            reference=reference,
            event=event,
            tier=tier,
            amount=amount,
            currency=tier.currency,
        )
        taken: set[str] = set()
        for buyer in buyers:
            for _ in range(buyer.quantity):
                code = self._allocate_ticket_code(event.title, taken)
                payload = build_qr_payload(txn.txn_id, code)
                Buyer.objects.create(
                    transaction=txn,
                    full_name=buyer.full_name,
                    email=buyer.email,
                    phone_number=buyer.phone_number,
                    ticket_code=code,
                    qr_payload=payload,
                    qr_code=make_qr_data_url(payload),
                )
        return txn

    def initiate(
        self, event_id: UUID, tier_id: UUID, buyers: list[BuyerInSchema], amount: Decimal
    ) -> PurchaseResponseSchema:
        """Start a purchase and return the gateway checkout URL.

        Availability is checked but not reserved; stock is only taken when the payment is verified.
        """
        event = Event.objects.filter(pk=event_id).first()
        if event is None:
            raise EventNotFoundError()
        tier = TicketTier.objects.filter(pk=tier_id, event=event).first()
        if tier is None:
            raise TicketNotFoundError()

        quantity = sum(buyer.quantity for buyer in buyers)
        ticket_service.ensure_available(tier, quantity)

        expected = tier.price * quantity
        if amount != expected:
            logger.info(
                "purchase_amount_mismatch", tier_id=str(tier.id), submitted=str(amount), expected=str(expected)
            )
            raise AmountMismatchError()

        txn = self._create_pending(event, tier, buyers, expected)
        try:
            checkout = self.gateway.initialize(
                email=buyers[0].email,
                amount=expected,
                reference=txn.reference,
                metadata={"txn_id": txn.txn_id, "transaction_id": str(txn.id)},
                callback_url=settings.PAYSTACK_CALLBACK_URL,
            )
        except PaymentGatewayError:
            logger.warning("purchase_initialize_failed", txn_id=txn.txn_id)
            txn.delete()
            raise

        logger.info("purchase_initiated", txn_id=txn.txn_id, tier_id=str(tier.id), quantity=quantity)
        return PurchaseResponseSchema(authorization_url=checkout.authorization_url, txn_id=txn.txn_id)

    def _dispatch_ticket_emails(self, txn: Transaction) -> None:
        for buyer in txn.buyers.all():
            try:
                send_ticket_email.delay(str(buyer.id))
            except Exception:
                logger.exception("ticket_email_dispatch_failed", txn_id=txn.txn_id, buyer_id=str(buyer.id))

    def verify(self, reference: str) -> VerificationResponseSchema:
        """Settle a purchase from the gateway's verdict."""
        result = self.gateway.verify(reference)
        if not result.is_successful:
            failed = Transaction.objects.filter(reference=reference, status=Transaction.Status.PENDING).update(
                status=Transaction.Status.FAILED, updated_at=timezone.now()
            )
            logger.info("payment_failed", reference=reference, gateway_status=result.status, marked=failed)
            raise PaymentFailedError()

        with transaction.atomic():
            txn = Transaction.objects.select_for_update().filter(reference=reference).first()
            if txn is None or txn.status != Transaction.Status.PENDING:
                logger.warning("payment_verify_invalid_transaction", reference=reference)
                raise InvalidTransactionError()
            txn.status = Transaction.Status.COMPLETED
            txn.gateway_charge_id = result.id
            txn.save(update_fields=["status", "gateway_charge_id", "updated_at"])
            ticket_service.decrement_for_sale(txn.tier_id, txn.buyers.count())

        logger.info("payment_completed", txn_id=txn.txn_id, gateway_charge_id=result.id)
        dashboard_service.invalidate_dashboard_cache(txn.currency)
        txn = Transaction.objects.with_related().get(pk=txn.pk)
        self._dispatch_ticket_emails(txn)
        return VerificationResponseSchema(
            transaction=TransactionSchema.from_orm(txn),
            event=VerifiedEventSchema.from_orm(txn.event),
            ticket=VerifiedTicketSchema(name=txn.tier.name, price=txn.tier.price, currency=txn.tier.currency),
        )

    @transaction.atomic
    def check_in(self, txn_id: str, ticket_code: str) -> Buyer:
        """Admit the holder of ``ticket_code`` once."""
        txn = Transaction.objects.filter(txn_id=txn_id).first()
        if txn is None:
            raise TransactionNotFoundError()
        if txn.status != Transaction.Status.COMPLETED:
            raise PaymentIncompleteError()
        buyer = Buyer.objects.select_for_update().filter(transaction=txn, ticket_code=ticket_code).first()
        if buyer is None:
            raise TicketNotFoundError()
        if buyer.checked_in:
            logger.info("ticket_already_checked_in", txn_id=txn_id, ticket_code=ticket_code)
            raise AlreadyCheckedInError()
        buyer.mark_checked_in()
        logger.info("ticket_checked_in", txn_id=txn_id, ticket_code=ticket_code)
        return buyer

    def list_transactions(self, filters: TransactionFilterSchema | None = None) -> QuerySet[Transaction]:
        qs = Transaction.objects.with_related()
        if filters is not None:
            qs = filters.filter(qs).distinct()
        return qs


def get_payment_service(gateway: PaystackGateway | None = None) -> PaymentService:
    return PaymentService(gateway=gateway or get_paystack_gateway())

