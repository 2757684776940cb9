"""Event, ticket tier and transaction schemas."""

import typing as t
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import UUID4, AwareDatetime, EmailStr, Field, field_validator, model_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from events.models import Buyer, Event, TicketTier, Transaction

Currencies = t.Literal[
    "NGN",  # Nigerian Naira
    "GHS",  # Ghanaian Cedi
    "KES",  # Kenyan Shilling
    "ZAR",  # South African Rand
    "USD",  # US Dollar
]


class EventCreateSchema(Schema):
    title: OneToTwoFiftyFiveString
    theme: StrippedString = ""
    venue: OneToTwoFiftyFiveString
    address: StrippedString = ""
    start: AwareDatetime
    end: AwareDatetime
    published: bool = False

    @model_validator(mode="after")
    def end_after_start(self) -> t.Self:
        """Validate that the event does not end before it starts."""
        if self.end < self.start:
            raise ValueError("The event cannot end before it starts.")
        return self


class EventSchema(ModelSchema):
    id: UUID4

    class Meta:
        model = Event
        fields = ["id", "title", "theme", "venue", "address", "start", "end", "published"]


class TicketTierCreateSchema(Schema):
    name: OneToTwoFiftyFiveString
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    currency: Currencies = "NGN"
    initial_quantity: int = Field(..., ge=0)
    benefits: list[StrippedString] = Field(default_factory=list)


class TicketTierUpdateSchema(Schema):
    """Partial update of a tier.

    ``price`` is accepted for compatibility but never applied; ``available_quantity`` is
    interpreted as the new number of tickets left for sale.
    """

    name: OneToTwoFiftyFiveString | None = None
    price: Decimal | None = None
    currency: Currencies | None = None
    available_quantity: int | None = None
    benefits: list[StrippedString] | None = None


class TicketTierSchema(ModelSchema):
    id: UUID4
    event_id: UUID4
    sold_quantity: int

    class Meta:
        model = TicketTier
        fields = ["id", "name", "price", "currency", "initial_quantity", "available_quantity", "benefits"]


class BuyerInSchema(Schema):
    full_name: OneToTwoFiftyFiveString
    email: EmailStr
    phone_number: t.Annotated[StrippedString, Field(min_length=7, max_length=32)]
    quantity: int = Field(1, ge=1, le=50)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class PurchaseSchema(Schema):
    event_id: UUID
    ticket_id: UUID = Field(..., description="The ticket tier to buy from.")
    buyers: list[BuyerInSchema] = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, description="Total price in major units, e.g. naira.")


class PurchaseResponseSchema(Schema):
    authorization_url: str
    txn_id: str


class BuyerSchema(ModelSchema):
    class Meta:
        model = Buyer
        fields = [
            "full_name",
            "email",
            "phone_number",
            "ticket_code",
            "checked_in",
            "checked_in_at",
            "qr_payload",
            "qr_code",
        ]


class TransactionSchema(ModelSchema):
    id: UUID4
    event_id: UUID4
    tier_id: UUID4
    buyers: list[BuyerSchema]
    checked_in_count: int

    class Meta:
        model = Transaction
        fields = [
            "id",
            "txn_id",
            "reference",
            "amount",
            "currency",
            "status",
            "gateway_charge_id",
            "created_at",
            "updated_at",
        ]


class TransactionListSchema(ModelSchema):
    id: UUID4
    event_title: str
    tier_name: str
    buyer_count: int
    checked_in_count: int

    class Meta:
        model = Transaction
        fields = ["id", "txn_id", "reference", "amount", "currency", "status", "created_at"]

    @staticmethod
    def resolve_event_title(obj: Transaction) -> str:
        return obj.event.title

    @staticmethod
    def resolve_tier_name(obj: Transaction) -> str:
        return obj.tier.name

    @staticmethod
    def resolve_buyer_count(obj: Transaction) -> int:
        return len(obj.buyers.all())


class VerifiedEventSchema(Schema):
    title: str
    venue: str
    address: str
    start: AwareDatetime
    end: AwareDatetime
    theme: str


class VerifiedTicketSchema(Schema):
    name: str
    price: Decimal
    currency: str


class VerificationResponseSchema(Schema):
    success: bool = True
    transaction: TransactionSchema
    event: VerifiedEventSchema
    ticket: VerifiedTicketSchema


class CheckedInTicketSchema(Schema):
    ticket_code: str
    full_name: str
    checked_in: bool
    checked_in_at: AwareDatetime | None = None


class CheckInResponseSchema(Schema):
    success: bool = True
    message: str = "Ticket checked in successfully."
    ticket: CheckedInTicketSchema



Trend = t.Literal["up", "down", "stable"]


class CountFigureSchema(Schema):
    current_month: int
    last_month: int
    percentage_change: float
    trend: Trend


class RevenueFigureSchema(Schema):
    current_month: Decimal
    last_month: Decimal
    percentage_change: float
    trend: Trend
    currency: str


class DashboardSchema(Schema):
    tickets_sold: CountFigureSchema = Field(..., description="Tickets on completed purchases.")
    revenue: RevenueFigureSchema = Field(..., description="Completed purchases in the requested currency.")
    active_events: CountFigureSchema = Field(..., description="Published events that had not ended by the month start.")
    upcoming_events: list[EventSchema]
    generated_at: AwareDatetime
