"""Ticket tier inventory.

``available_quantity`` is what remains for sale and ``initial_quantity`` what was ever
released; every mutation here keeps ``0 <= available_quantity <= initial_quantity``.
"""

from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet

from events.exceptions import InvalidQuantityError, NotEnoughTicketsError, TicketNotFoundError
from events.models import Event, TicketTier
from events.schema import TicketTierCreateSchema, TicketTierUpdateSchema

logger = structlog.get_logger(__name__)


def create_ticket_tier(event: Event, data: TicketTierCreateSchema) -> TicketTier:
    """Create a tier whose whole stock is available."""
    tier = TicketTier.objects.create(
        event=event,
        name=data.name,
        price=data.price,
        currency=data.currency,
        initial_quantity=data.initial_quantity,
        available_quantity=data.initial_quantity,
        benefits=list(data.benefits),
    )
    logger.info("ticket_tier_created", event_id=str(event.id), tier_id=str(tier.id), quantity=tier.initial_quantity)
    return tier


def _lock(tier_id: UUID) -> TicketTier:
    tier = TicketTier.objects.select_for_update().filter(pk=tier_id).first()
    if tier is None:
        raise TicketNotFoundError()
    return tier


def apply_quantity_edit(tier: TicketTier, quantity: int) -> TicketTier:
    """Set the number of tickets left for sale.

    Zero closes sales and shrinks the released stock by what was still unsold; a value above
    what is available restocks the tier by the difference.
    """
    if quantity < 0:
        raise InvalidQuantityError()
    if quantity == 0:
        tier.initial_quantity -= tier.available_quantity
        tier.available_quantity = 0
    elif quantity > tier.available_quantity:
        tier.initial_quantity += quantity - tier.available_quantity
        tier.available_quantity = quantity
    else:
        tier.available_quantity = quantity
    return tier


@transaction.atomic
def update_ticket_tier(tier: TicketTier, data: TicketTierUpdateSchema) -> TicketTier:
    """Apply a partial update. Price changes are not applied once a tier exists."""
    locked = _lock(tier.pk)
    changes = data.model_dump(exclude_unset=True)
    if changes.pop("price", None) is not None:
        logger.info("ticket_tier_price_edit_ignored", tier_id=str(locked.id))

    quantity: int | None = changes.pop("available_quantity", None)
    if quantity is not None:
        apply_quantity_edit(locked, quantity)

    for field, value in changes.items():
        if value is not None:
            setattr(locked, field, value)

    locked.save()
    logger.info(
        "ticket_tier_updated",
        tier_id=str(locked.id),
        initial_quantity=locked.initial_quantity,
        available_quantity=locked.available_quantity,
    )
    return locked


def ensure_available(tier: TicketTier, quantity: int) -> None:
    """Raise if fewer than ``quantity`` tickets are left. Nothing is reserved."""
    if quantity > tier.available_quantity:
        logger.info(
            "ticket_tier_not_enough_tickets",
            tier_id=str(tier.id),
            requested=quantity,
            available=tier.available_quantity,
        )
        raise NotEnoughTicketsError()


@transaction.atomic
def decrement_for_sale(tier_id: UUID, quantity: int) -> TicketTier:
    """Take ``quantity`` sold tickets off the tier, never going below zero."""
    tier = _lock(tier_id)
    remaining = tier.available_quantity - quantity
    if remaining < 0:
        logger.warning(
            "ticket_tier_oversold",
            tier_id=str(tier.id),
            sold=quantity,
            available=tier.available_quantity,
        )
    tier.available_quantity = max(remaining, 0)
    tier.save(update_fields=["available_quantity", "updated_at"])
    return tier


def tiers_for_event(event: Event) -> QuerySet[TicketTier]:
    return TicketTier.objects.filter(event=event).select_related("event")
