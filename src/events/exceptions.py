"""Domain errors of the ticketing core.

Every error carries a stable machine-readable `code`, the HTTP status it maps to and any structured
details the client needs (for instance how many tickets are still available).
"""

import typing as t


class TicketingError(Exception):
    """Base class for every failure the ticketing services report to their callers."""

    code: str = "ticketing_error"
    status_code: int = 400
    default_message: str = "The ticketing operation failed."

    def __init__(self, message: str | None = None, **extra: t.Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class NotFoundError(TicketingError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class EventNotFound(NotFoundError):
    code = "event_not_found"
    default_message = "Event not found."


class TicketNotFound(NotFoundError):
    """Also raised for failed check-ins, whatever the reason, so a refusal reveals nothing about the credentials."""

    code = "ticket_not_found"
    default_message = "Ticket not found or invalid."


class EventNotAvailable(TicketingError):
    code = "event_not_available"
    default_message = "Event is not available for ticket purchase."


class EventAlreadyStarted(TicketingError):
    code = "event_already_started"
    default_message = "Cannot purchase tickets for events that have already started."


class EventAlreadyEnded(TicketingError):
    code = "event_already_ended"
    default_message = "The event has already ended."


class EventAlreadyValidated(TicketingError):
    code = "event_already_validated"
    default_message = "The event is already validated."


class EventHasSoldTickets(TicketingError):
    code = "event_has_sold_tickets"
    status_code = 409
    default_message = "Cannot delete an event with sold tickets. Cancel it instead."

    def __init__(self, sold_tickets: int) -> None:
        super().__init__(sold_tickets=sold_tickets)


class InsufficientCapacity(TicketingError):
    code = "insufficient_capacity"
    status_code = 409

    def __init__(self, available: int) -> None:
        super().__init__(f"Only {available} tickets available.", available=available)


class InvalidQuantity(TicketingError):
    code = "invalid_quantity"

    def __init__(self, quantity: int, maximum: int) -> None:
        super().__init__(f"Quantity must be between 1 and {maximum}.", quantity=quantity, maximum=maximum)


class MissingCustomerInfo(TicketingError):
    code = "missing_customer_info"
    default_message = "Customer first name, last name and email are required for guest purchases."


class PaymentFailed(TicketingError):
    code = "payment_failed"
    status_code = 402
    default_message = "Payment failed. Please try again."


class NotActive(TicketingError):
    code = "ticket_not_active"
    default_message = "Ticket is not active."


class NotCancellable(TicketingError):
    code = "ticket_not_cancellable"
    default_message = "Ticket cannot be cancelled."


class NotRefundable(TicketingError):
    code = "ticket_not_refundable"
    default_message = "Ticket cannot be refunded."


class Expired(TicketingError):
    code = "ticket_expired"
    default_message = "Ticket has expired."


class TooEarly(TicketingError):
    code = "check_in_too_early"
    default_message = "Ticket can only be validated on the event day."


class CancellationWindowClosed(TicketingError):
    code = "cancellation_window_closed"

    def __init__(self, hours_until_event: float, window_hours: int) -> None:
        super().__init__(
            f"Tickets cannot be cancelled less than {window_hours} hours before the event.",
            hours_until_event=hours_until_event,
        )
