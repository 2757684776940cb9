from ninja_extra import status

from common.exceptions import ConflictError, InvariantViolation, NotFoundError, ServiceError, UpstreamError


class EventNotFoundError(NotFoundError):
    default_detail = "Event not found."


class TicketNotFoundError(NotFoundError):
    """Raised when a ticket tier, or a ticket within a transaction, does not exist."""

    default_detail = "Ticket not found."


class TransactionNotFoundError(NotFoundError):
    default_detail = "Transaction not found."


class NotEnoughTicketsError(ConflictError):
    """Raised when a purchase asks for more tickets than the tier has left."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Not enough tickets available."


class InvalidQuantityError(InvariantViolation):
    default_detail = "Quantity cannot be negative."


class AmountMismatchError(InvariantViolation):
    """Raised when the amount submitted for a purchase differs from the tier price times quantity."""

    default_detail = "Amount does not match the ticket price."


class InvalidTransactionError(InvariantViolation):
    """Raised when a verified payment has no pending transaction to complete."""

    default_detail = "Invalid transaction."


class PaymentFailedError(ServiceError):
    default_detail = "Payment failed."


class PaymentIncompleteError(InvariantViolation):
    default_detail = "Payment not completed."


class AlreadyCheckedInError(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Ticket already checked in."


class PaymentGatewayError(UpstreamError):
    """Raised when the payment gateway cannot be reached or rejects a request."""

    default_detail = "Payment gateway error."


class TicketCodeExhaustedError(ServiceError):
    """Raised when no unused ticket code could be generated."""

    status_code = 503
    default_detail = "Could not allocate a ticket code. Please retry."
