"""Django ORM implementation of the stores.

Capacity is only ever changed through single conditional UPDATE statements, so concurrent purchases
cannot oversell even across processes. Ticket state changes use the same technique: the write only
happens if the stored status is still the one the transition started from.
"""

import typing as t
from uuid import UUID

from django.db import transaction
from django.db.models import F
from django.db.models.functions import Least
from django.utils import timezone

from events.models import Event, Ticket, TicketStatus
from events.stores.interfaces import EventStore, TicketStore


class DjangoEventStore(EventStore):
    """Relational event store using the Django ORM."""

    def find_by_id(self, event_id: UUID) -> Event | None:
        return Event.objects.with_organizer().filter(pk=event_id).first()

    def save(self, event: Event) -> Event:
        event.save()
        return event

    def reserve_capacity(self, event_id: UUID, quantity: int) -> int | None:
        with transaction.atomic():
            updated = Event.objects.filter(pk=event_id, available_tickets__gte=quantity).update(
                available_tickets=F("available_tickets") - quantity
            )
            if not updated:
                return None
            return self.available_tickets(event_id)

    def release_capacity(self, event_id: UUID, quantity: int) -> int:
        with transaction.atomic():
            Event.objects.filter(pk=event_id).update(
                available_tickets=Least(F("available_tickets") + quantity, F("total_capacity"))
            )
            return self.available_tickets(event_id)

    def available_tickets(self, event_id: UUID) -> int:
        return Event.objects.values_list("available_tickets", flat=True).get(pk=event_id)


class DjangoTicketStore(TicketStore):
    """Relational ticket store using the Django ORM."""

    def create(self, ticket: Ticket) -> Ticket:
        ticket.save(force_insert=True)
        return ticket

    def find_by_id(self, ticket_id: UUID) -> Ticket | None:
        return Ticket.objects.full().filter(pk=ticket_id).first()

    def save(self, ticket: Ticket) -> Ticket:
        ticket.save()
        return ticket

    def save_transition(self, ticket: Ticket, expected_status: TicketStatus, fields: t.Iterable[str]) -> bool:
        values: dict[str, t.Any] = {"updated_at": timezone.now()}
        for name in fields:
            attname = Ticket._meta.get_field(name).attname
            values[attname] = getattr(ticket, attname)
        updated = Ticket.objects.filter(pk=ticket.pk, status=expected_status).update(**values)
        if updated:
            ticket.updated_at = values["updated_at"]
        return bool(updated)

    def delete(self, ticket: Ticket) -> None:
        ticket.delete()

    def find_by_number_and_code(self, ticket_number: str, validation_code: str) -> Ticket | None:
        return Ticket.objects.full().filter(ticket_number=ticket_number, validation_code=validation_code).first()
