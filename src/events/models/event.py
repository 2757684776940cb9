from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel


class Event(TimeStampedModel):
    title = models.CharField(max_length=255, db_index=True)
    theme = models.CharField(max_length=255, blank=True, default="")
    venue = models.CharField(max_length=255)
    address = models.CharField(max_length=512, blank=True, default="")
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    published = models.BooleanField(default=False, db_index=True)

    class Meta:
        ordering = ["-start"]
        constraints = [
            models.CheckConstraint(condition=models.Q(end__gte=models.F("start")), name="event_end_after_start"),
        ]

    def clean(self) -> None:
        """Events cannot end before they start."""
        super().clean()
        if self.start and self.end and self.end < self.start:
            raise DjangoValidationError({"end": "The event cannot end before it starts."})

    def __str__(self) -> str:
        return self.title


class TicketTier(TimeStampedModel):
    """A priced class of tickets for an event.

    ``initial_quantity`` is the stock ever made available and ``available_quantity`` what is
    still for sale, so ``0 <= available_quantity <= initial_quantity`` always holds.
    """

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_tiers")
    name = models.CharField(max_length=255, db_index=True)
    price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY, help_text="ISO 4217 currency code")
    initial_quantity = models.PositiveIntegerField(default=0)
    available_quantity = models.PositiveIntegerField(default=0)
    benefits = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_tier_name_per_event"),
            models.CheckConstraint(condition=models.Q(available_quantity__gte=0), name="tier_available_non_negative"),
            models.CheckConstraint(
                condition=models.Q(available_quantity__lte=models.F("initial_quantity")),
                name="tier_available_within_initial",
            ),
        ]

    def clean(self) -> None:
        """Validate stock bounds and the benefits list."""
        super().clean()
        if self.available_quantity > self.initial_quantity:
            raise DjangoValidationError(
                {"available_quantity": "Available quantity cannot exceed the initial quantity."}
            )
        if not isinstance(self.benefits, list) or not all(isinstance(b, str) for b in self.benefits):
            raise DjangoValidationError({"benefits": "Benefits must be a list of strings."})
        if self.currency:
            self.currency = self.currency.upper()

    @property
    def sold_quantity(self) -> int:
        return self.initial_quantity - self.available_quantity

    def __str__(self) -> str:
        return f"{self.name} for event {self.event.title}"
