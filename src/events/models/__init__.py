from .event import Event, EventCategory
from .ticket import GuestOwner, Owner, PaymentMethod, PaymentStatus, RegisteredOwner, Ticket, TicketStatus

__all__ = [
    "Event",
    "EventCategory",
    "GuestOwner",
    "Owner",
    "PaymentMethod",
    "PaymentStatus",
    "RegisteredOwner",
    "Ticket",
    "TicketStatus",
]
