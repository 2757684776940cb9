from ninja_extra import api_controller, route

from common.authentication import SessionJWTAuth
from common.controllers import AdminAwareController
from common.throttling import PaymentThrottle
from events import schema
from events.models import Buyer
from events.service.payment_service import get_payment_service


@api_controller("/payment", tags=["Payments"], throttle=PaymentThrottle())
class PaymentController(AdminAwareController):
    @route.post("/purchase", url_name="purchase_ticket", response=schema.PurchaseResponseSchema)
    def purchase(self, payload: schema.PurchaseSchema) -> schema.PurchaseResponseSchema:
        """Start a ticket purchase and get the Paystack checkout URL.

        `amount` must equal the tier price times the total quantity across buyers. Each unit bought
        becomes its own ticket with a unique code and QR code.
        """
        return get_payment_service().initiate(payload.event_id, payload.ticket_id, payload.buyers, payload.amount)

    @route.get("/verify/{reference}", url_name="verify_payment", response=schema.VerificationResponseSchema)
    def verify(self, reference: str) -> schema.VerificationResponseSchema:
        """Confirm a purchase after the Paystack redirect.

        On success the stock is taken and every ticket holder is emailed their ticket.
        """
        return get_payment_service().verify(reference)

    @route.get("/check-in", url_name="check_in_ticket", response=schema.CheckInResponseSchema, auth=SessionJWTAuth())
    def check_in(self, txn_id: str, ticket_id: str) -> schema.CheckInResponseSchema:
        """Admit a ticket holder by the values encoded in their QR code.

        `ticket_id` is the ticket code, e.g. `ABC-123456`.
        """
        buyer: Buyer = get_payment_service().check_in(txn_id, ticket_id)
        return schema.CheckInResponseSchema(ticket=schema.CheckedInTicketSchema.from_orm(buyer))
