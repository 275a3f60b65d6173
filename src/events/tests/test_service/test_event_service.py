from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.db.models import F
from django.utils import timezone

from accounts.models import User
from events.exceptions import EventAlreadyEnded, EventAlreadyValidated, EventHasSoldTickets
from events.models import Event, GuestOwner, PaymentStatus, RegisteredOwner, TicketStatus
from events.schema import EventCreateSchema
from events.service import event_service

from ..conftest import make_db_ticket

pytestmark = pytest.mark.django_db


@pytest.fixture
def create_payload(next_week: datetime) -> EventCreateSchema:
    return EventCreateSchema(
        title="Python Meetup",
        description="Lightning talks.",
        venue_name="Library",
        city="Graz",
        start_date=next_week,
        end_date=next_week + timedelta(hours=3),
        ticket_price=Decimal("12.50"),
        total_capacity=40,
    )


class TestCreateEvent:
    def test_organizer_event_starts_as_draft(self, organizer: User, create_payload: EventCreateSchema) -> None:
        event = event_service.create_event(organizer, create_payload)

        assert event.status == Event.EventStatus.DRAFT
        assert event.is_validated is False
        assert event.organizer == organizer
        assert event.available_tickets == 40
        assert event.sold_tickets == 0

    def test_admin_event_is_published(self, platform_admin: User, create_payload: EventCreateSchema) -> None:
        event = event_service.create_event(platform_admin, create_payload)

        assert event.status == Event.EventStatus.PUBLISHED
        assert event.is_validated is True
        assert event.validated_by == platform_admin
        assert event.validated_at is not None


class TestModeration:
    def test_validate_publishes(self, draft_event: Event, platform_admin: User) -> None:
        event = event_service.validate_event(draft_event, platform_admin)

        event.refresh_from_db()
        assert event.is_validated is True
        assert event.status == Event.EventStatus.PUBLISHED
        assert event.validated_by == platform_admin

    def test_validate_twice(self, published_event: Event, platform_admin: User) -> None:
        with pytest.raises(EventAlreadyValidated):
            event_service.validate_event(published_event, platform_admin)

    def test_validate_past_event(self, draft_event: Event, platform_admin: User) -> None:
        draft_event.start_date = timezone.now() - timedelta(days=2)
        draft_event.end_date = timezone.now() - timedelta(days=1)
        draft_event.save()

        with pytest.raises(EventAlreadyEnded):
            event_service.validate_event(draft_event, platform_admin)

    def test_reject_cancels(self, draft_event: Event, platform_admin: User) -> None:
        event = event_service.reject_event(draft_event, platform_admin, reason="Venue unknown")

        event.refresh_from_db()
        assert event.status == Event.EventStatus.CANCELLED
        assert event.is_validated is False


class TestDeleteEvent:
    def test_organizer_without_sales_cancels(self, published_event: Event, organizer: User) -> None:
        assert event_service.delete_event(published_event, organizer) is False

        published_event.refresh_from_db()
        assert published_event.status == Event.EventStatus.CANCELLED

    def test_organizer_with_sales_is_refused(self, published_event: Event, organizer: User, buyer: User) -> None:
        make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=2)

        with pytest.raises(EventHasSoldTickets) as exc_info:
            event_service.delete_event(published_event, organizer)

        assert exc_info.value.extra == {"sold_tickets": 2}
        published_event.refresh_from_db()
        assert published_event.status == Event.EventStatus.PUBLISHED

    def test_admin_deletes_for_good(self, published_event: Event, platform_admin: User, buyer: User) -> None:
        make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        assert event_service.delete_event(published_event, platform_admin) is True
        assert not Event.objects.filter(pk=published_event.pk).exists()


class TestEventStats:
    def test_empty_event(self, published_event: Event) -> None:
        stats = event_service.get_event_stats(published_event)

        assert stats.sold_tickets == 0
        assert stats.available_tickets == 10
        assert stats.attendance_rate == 0.0
        assert stats.total_revenue == Decimal("0")
        assert stats.status_breakdown == {}

    def test_breakdown_and_revenue(self, published_event: Event, buyer: User) -> None:
        guest = GuestOwner(first_name="Gina", last_name="Guest", email="gina@example.com")
        make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=2)
        make_db_ticket(published_event, guest, quantity=1)
        make_db_ticket(published_event, guest, quantity=1, status=TicketStatus.USED)
        make_db_ticket(
            published_event,
            RegisteredOwner(user_id=buyer.pk),
            quantity=3,
            status=TicketStatus.CANCELLED,
            payment_status=PaymentStatus.REFUNDED,
        )
        Event.objects.filter(pk=published_event.pk).update(available_tickets=F("available_tickets") + 3)

        stats = event_service.get_event_stats(published_event)

        assert stats.sold_tickets == 4
        assert stats.available_tickets == 6
        assert stats.attendance_rate == 40.0
        assert stats.total_revenue == Decimal("100.00")
        assert stats.status_breakdown["active"].tickets == 2
        assert stats.status_breakdown["active"].seats == 3
        assert stats.status_breakdown["active"].revenue == Decimal("75.00")
        assert stats.status_breakdown["used"].seats == 1
        assert stats.status_breakdown["cancelled"].seats == 3
        assert stats.status_breakdown["cancelled"].revenue == Decimal("0")
