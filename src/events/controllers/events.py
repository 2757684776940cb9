from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route, status

from common.authentication import SessionJWTAuth
from common.controllers import AdminAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.exceptions import EventNotFoundError, TicketNotFoundError
from events.service import ticket_service


@api_controller("/events", auth=SessionJWTAuth(), tags=["Events"], throttle=WriteThrottle())
class EventController(AdminAwareController):
    """Event and ticket tier management."""

    def get_event(self, event_id: UUID) -> models.Event:
        event = models.Event.objects.filter(pk=event_id).first()
        if event is None:
            raise EventNotFoundError()
        return event

    @route.post("/", url_name="create_event", response={status.HTTP_201_CREATED: schema.EventSchema})
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event. Ticket tiers are added separately."""
        return status.HTTP_201_CREATED, models.Event.objects.create(**payload.model_dump())

    @route.get(
        "/{event_id}/tickets",
        url_name="list_ticket_tiers",
        response=list[schema.TicketTierSchema],
        throttle=UserDefaultThrottle(),
    )
    def list_ticket_tiers(self, event_id: UUID) -> QuerySet[models.TicketTier]:
        """List the ticket tiers of an event with their remaining stock."""
        return ticket_service.tiers_for_event(self.get_event(event_id))

    @route.post(
        "/{event_id}/tickets",
        url_name="create_ticket_tier",
        response={status.HTTP_201_CREATED: schema.TicketTierSchema},
    )
    def create_ticket_tier(
        self, event_id: UUID, payload: schema.TicketTierCreateSchema
    ) -> tuple[int, models.TicketTier]:
        """Create a ticket tier; its whole initial quantity is available for sale."""
        return status.HTTP_201_CREATED, ticket_service.create_ticket_tier(self.get_event(event_id), payload)

    @route.patch("/{event_id}/tickets/{tier_id}", url_name="update_ticket_tier", response=schema.TicketTierSchema)
    def update_ticket_tier(
        self, event_id: UUID, tier_id: UUID, payload: schema.TicketTierUpdateSchema
    ) -> models.TicketTier:
        """Edit a ticket tier.

        Setting `available_quantity` to 0 closes sales and removes the unsold stock; a value above the
        current availability restocks the tier. Price edits are ignored.
        """
        tier = models.TicketTier.objects.filter(pk=tier_id, event_id=event_id).first()
        if tier is None:
            raise TicketNotFoundError()
        return ticket_service.update_ticket_tier(tier, payload)
