# src/events/filters.py

from django.db.models import Q
from django.utils import timezone
from ninja import Field, FilterSchema

from events.models import Event, EventCategory, PaymentStatus, TicketStatus


class EventFilterSchema(FilterSchema):
    category: EventCategory | None = None
    city: str | None = Field(None, q="city__iexact")  # type: ignore[call-overload]
    status: Event.EventStatus | None = None
    upcoming: bool | None = True

    def filter_upcoming(self, upcoming: bool | None) -> Q:
        """Helper to find events that did not start yet."""
        if upcoming:
            return Q(start_date__gt=timezone.now())
        return Q()


class TicketFilterSchema(FilterSchema):
    status: TicketStatus | None = None
    payment_status: PaymentStatus | None = None
