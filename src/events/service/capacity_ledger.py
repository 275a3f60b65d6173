"""Capacity ledger: the only way seats are taken from or given back to an event."""

import structlog
from django.conf import settings

from events.exceptions import InsufficientCapacity, InvalidQuantity
from events.models import Event
from events.stores.interfaces import EventStore

logger = structlog.get_logger(__name__)


class CapacityLedger:
    """Reserves and releases seats on an event.

    Both operations delegate to a single atomic store operation and then refresh the in-memory event's
    counter with what the store reports, so the caller never works with a stale availability.
    """

    def __init__(self, events: EventStore) -> None:
        self.events = events

    def reserve(self, event: Event, quantity: int) -> int:
        """Take `quantity` seats.

        Returns:
            The remaining availability.

        Raises:
            InvalidQuantity: if quantity is not positive.
            InsufficientCapacity: if fewer than `quantity` seats are left. Nothing is taken in that case.
        """
        _ensure_positive(quantity)
        remaining = self.events.reserve_capacity(event.pk, quantity)
        if remaining is None:
            available = self.events.available_tickets(event.pk)
            event.available_tickets = available
            logger.info("capacity_reservation_refused", event_id=str(event.pk), quantity=quantity, available=available)
            raise InsufficientCapacity(available)
        event.available_tickets = remaining
        logger.info("capacity_reserved", event_id=str(event.pk), quantity=quantity, available=remaining)
        return remaining

    def release(self, event: Event, quantity: int) -> int:
        """Give back `quantity` seats.

        The result is clamped at the event's total capacity, so releasing the same seats twice never
        creates seats that do not exist.
        """
        _ensure_positive(quantity)
        available = self.events.release_capacity(event.pk, quantity)
        event.available_tickets = available
        logger.info("capacity_released", event_id=str(event.pk), quantity=quantity, available=available)
        return available


def _ensure_positive(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantity(quantity, settings.TICKETING_MAX_TICKETS_PER_ORDER)
