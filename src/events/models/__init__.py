from .event import Event, TicketTier
from .transaction import Buyer, Transaction

__all__ = [
    "Buyer",
    "Event",
    "TicketTier",
    "Transaction",
]
