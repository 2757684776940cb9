import re
import secrets
import typing as t

from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel

from .event import Event, TicketTier

DEFAULT_TICKET_PREFIX = "TKT"


def generate_reference() -> str:
    """Twelve hex characters; the gateway reference of a transaction."""
    return secrets.token_hex(6)


def txn_id_for(reference: str) -> str:
    return f"TXN-{reference}"


def generate_ticket_code(event_title: str) -> str:
    """A ticket code such as ``AFR-123456``.

    The prefix is taken from the event title, not the tier name, so every code scanned at one
    event's gate shares it whichever tier was bought.
    """
    prefix = re.sub(r"[^A-Za-z0-9]", "", event_title)[:3].upper() or DEFAULT_TICKET_PREFIX
    return f"{prefix}-{100_000 + secrets.randbelow(900_000)}"


class TransactionQuerySet(models.QuerySet["Transaction"]):
    def with_related(self) -> t.Self:
        return self.select_related("event", "tier").prefetch_related("buyers")


class Transaction(TimeStampedModel):
    """A ticket purchase, from gateway initialization to its terminal state."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    txn_id = models.CharField(max_length=32, unique=True, editable=False)
    reference = models.CharField(max_length=64, unique=True, default=generate_reference, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="transactions")
    tier = models.ForeignKey(TicketTier, on_delete=models.PROTECT, related_name="transactions")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)
    status = models.CharField(choices=Status.choices, default=Status.PENDING, max_length=20, db_index=True)
    gateway_charge_id = models.CharField(max_length=64, null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "status"], name="txn_event_status_idx"),
            models.Index(fields=["status", "created_at"], name="txn_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.txn_id} ({self.status})"

    @property
    def checked_in_count(self) -> int:
        return sum(1 for buyer in self.buyers.all() if buyer.checked_in)


class Buyer(TimeStampedModel):
    """One ticket holder of a transaction; each unit bought is its own buyer."""

    transaction = models.ForeignKey(Transaction, on_delete=models.CASCADE, related_name="buyers")
    full_name = models.CharField(max_length=255)
    email = models.EmailField()
    phone_number = models.CharField(max_length=32)
    ticket_code = models.CharField(max_length=20, unique=True)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    qr_payload = models.URLField(max_length=512, blank=True, default="")
    qr_code = models.TextField(blank=True, default="", help_text="PNG data URL of the check-in QR code")

    class Meta:
        ordering = ["created_at"]
        indexes = [models.Index(fields=["email"], name="buyer_email_idx")]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.ticket_code})"

    def mark_checked_in(self) -> None:
        self.checked_in = True
        self.checked_in_at = timezone.now()
        self.save(update_fields=["checked_in", "checked_in_at", "updated_at"])
