from decimal import Decimal

import structlog
from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounts.models import User
from events.exceptions import EventAlreadyEnded, EventAlreadyValidated, EventHasSoldTickets
from events.models import Event, PaymentStatus, Ticket
from events.schema import EventCreateSchema, EventStatisticsSchema, TicketStatusBreakdownSchema

logger = structlog.get_logger(__name__)


def create_event(organizer: User, payload: EventCreateSchema) -> Event:
    """Create an event owned by the organizer.

    Events created by organizers start as drafts and wait for an administrator to validate them.
    Events created by administrators are validated and published right away.
    """
    event = Event(organizer=organizer, **payload.model_dump())
    if organizer.is_admin:
        event.status = Event.EventStatus.PUBLISHED
        event.is_validated = True
        event.validated_by = organizer
        event.validated_at = timezone.now()
    event.save()
    logger.info(
        "event_created",
        event_id=str(event.pk),
        organizer_id=str(organizer.pk),
        status=event.status,
        total_capacity=event.total_capacity,
    )
    return event


def validate_event(event: Event, admin: User) -> Event:
    """Approve an event and publish it.

    Raises:
        EventAlreadyValidated: if the event was already approved.
        EventAlreadyEnded: if the event is over.
    """
    now = timezone.now()
    if event.is_validated:
        raise EventAlreadyValidated()
    if event.end_date <= now:
        raise EventAlreadyEnded()
    event.is_validated = True
    event.validated_by = admin
    event.validated_at = now
    event.status = Event.EventStatus.PUBLISHED
    event.save(update_fields=["is_validated", "validated_by", "validated_at", "status", "updated_at"])
    logger.info("event_validated", event_id=str(event.pk), admin_id=str(admin.pk))
    return event


def reject_event(event: Event, admin: User, reason: str = "") -> Event:
    """Refuse an event. It is cancelled and can no longer sell tickets."""
    event.is_validated = False
    event.status = Event.EventStatus.CANCELLED
    event.save(update_fields=["is_validated", "status", "updated_at"])
    logger.info("event_rejected", event_id=str(event.pk), admin_id=str(admin.pk), reason=reason)
    return event


def cancel_event(event: Event, actor: User) -> Event:
    """Stop an event from selling tickets. Tickets already sold stay as they are."""
    event.status = Event.EventStatus.CANCELLED
    event.save(update_fields=["status", "updated_at"])
    logger.info("event_cancelled", event_id=str(event.pk), actor_id=str(actor.pk))
    return event


@transaction.atomic
def delete_event(event: Event, actor: User) -> bool:
    """Delete an event.

    Only administrators really delete. For organizers the event is cancelled instead, and only as long as
    no ticket was sold.

    Returns:
        bool: True if the event was deleted, False if it was cancelled.

    Raises:
        EventHasSoldTickets: if a non-administrator tries to remove an event with sold tickets.
    """
    event.refresh_from_db(fields=["available_tickets"])
    sold_tickets = event.sold_tickets
    if not actor.is_admin:
        if sold_tickets > 0:
            raise EventHasSoldTickets(sold_tickets)
        cancel_event(event, actor)
        return False
    logger.info("event_deleted", event_id=str(event.pk), admin_id=str(actor.pk), sold_tickets=sold_tickets)
    event.delete()
    return True


def get_event_stats(event: Event) -> EventStatisticsSchema:
    """Sales figures of an event.

    Seats are counted per ticket status (a ticket for three people counts three). Revenue only includes
    tickets whose payment went through and was not refunded.
    """
    event.refresh_from_db(fields=["available_tickets"])
    zero = Value(Decimal("0"), output_field=DecimalField(max_digits=12, decimal_places=2))
    completed = Q(payment_status=PaymentStatus.COMPLETED)
    rows = (
        Ticket.objects.filter(event=event)
        .values("status")
        .annotate(
            tickets=Count("id"),
            seats=Coalesce(Sum("quantity"), 0),
            revenue=Coalesce(Sum("total_price", filter=completed), zero),
        )
        .order_by("status")
    )
    breakdown = {
        row["status"]: TicketStatusBreakdownSchema(tickets=row["tickets"], seats=row["seats"], revenue=row["revenue"])
        for row in rows
    }
    sold_tickets = event.sold_tickets
    attendance_rate = round(sold_tickets / event.total_capacity * 100, 2) if sold_tickets else 0.0
    return EventStatisticsSchema(
        total_capacity=event.total_capacity,
        sold_tickets=sold_tickets,
        available_tickets=event.available_tickets,
        attendance_rate=attendance_rate,
        total_revenue=sum((entry.revenue for entry in breakdown.values()), Decimal("0")),
        status_breakdown=breakdown,
    )
