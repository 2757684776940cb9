# src/events/filters.py

from uuid import UUID

from ninja import Field, FilterSchema

from events.models import Transaction


class TransactionFilterSchema(FilterSchema):
    status: Transaction.Status | None = None
    event_id: UUID | None = None
    email: str | None = Field(None, q="buyers__email__iexact")  # type: ignore[call-overload]
