"""Store interfaces (repository pattern).

The ticketing services only talk to these interfaces, so they run unchanged against the Django ORM
or against in-memory stores.
"""

import typing as t
from abc import ABC, abstractmethod
from uuid import UUID

from events.models import Event, Ticket, TicketStatus


class EventStore(ABC):
    """Interface for event persistence and the capacity ledger."""

    @abstractmethod
    def find_by_id(self, event_id: UUID) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def save(self, event: Event) -> Event:
        """Persist the event's descriptive fields. Never writes `available_tickets`."""
        ...

    @abstractmethod
    def reserve_capacity(self, event_id: UUID, quantity: int) -> int | None:
        """Atomically take `quantity` seats if at least that many are available.

        Returns the remaining availability, or None when there were not enough seats (nothing changed).
        """
        ...

    @abstractmethod
    def release_capacity(self, event_id: UUID, quantity: int) -> int:
        """Atomically give back `quantity` seats, clamped at the total capacity. Returns the new availability."""
        ...

    @abstractmethod
    def available_tickets(self, event_id: UUID) -> int:
        """Read the current availability straight from the store."""
        ...


class TicketStore(ABC):
    """Interface for ticket persistence."""

    @abstractmethod
    def create(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    def find_by_id(self, ticket_id: UUID) -> Ticket | None:
        """Return a ticket with its event, or None if not found."""
        ...

    @abstractmethod
    def save(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    def save_transition(self, ticket: Ticket, expected_status: TicketStatus, fields: t.Iterable[str]) -> bool:
        """Write `fields` of the ticket, but only if its stored status is still `expected_status`.

        Returns False, writing nothing, when another request changed the ticket's status first.
        """
        ...

    @abstractmethod
    def delete(self, ticket: Ticket) -> None:
        ...

    @abstractmethod
    def find_by_number_and_code(self, ticket_number: str, validation_code: str) -> Ticket | None:
        """Return the ticket matching both credentials, or None."""
        ...
