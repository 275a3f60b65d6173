import typing as t
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import User
from conftest import UserFactory
from events.models import Event, GuestOwner, RegisteredOwner, Ticket
from events.service.capacity_ledger import CapacityLedger
from events.service.identity import IdentityGenerator, build_qr_payload
from events.service.purchase import PurchaseService
from events.service.ticket_service import TicketService

from .doubles import ApprovingGateway, FixedClock, InMemoryEventStore, InMemoryTicketStore

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def client_for(user: User) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


# --- Database fixtures ---


@pytest.fixture
def organizer(user_factory: UserFactory) -> User:
    return user_factory(username="organizer@example.com", role=User.Role.ORGANIZER)


@pytest.fixture
def other_organizer(user_factory: UserFactory) -> User:
    return user_factory(username="other.organizer@example.com", role=User.Role.ORGANIZER)


@pytest.fixture
def platform_admin(user_factory: UserFactory) -> User:
    return user_factory(username="admin@example.com", role=User.Role.ADMIN)


@pytest.fixture
def buyer(user_factory: UserFactory) -> User:
    return user_factory(username="buyer@example.com", first_name="Bea", last_name="Buyer")


@pytest.fixture
def organizer_client(organizer: User) -> Client:
    return client_for(organizer)


@pytest.fixture
def other_organizer_client(other_organizer: User) -> Client:
    return client_for(other_organizer)


@pytest.fixture
def platform_admin_client(platform_admin: User) -> Client:
    return client_for(platform_admin)


@pytest.fixture
def buyer_client(buyer: User) -> Client:
    return client_for(buyer)


@pytest.fixture
def published_event(organizer: User, next_week: datetime) -> Event:
    return Event.objects.create(
        title="Tech Summit",
        description="A day of talks.",
        venue_name="Main Hall",
        city="Vienna",
        organizer=organizer,
        status=Event.EventStatus.PUBLISHED,
        is_validated=True,
        start_date=next_week,
        end_date=next_week + timedelta(hours=8),
        ticket_price=Decimal("25.00"),
        total_capacity=10,
    )


@pytest.fixture
def draft_event(organizer: User, next_week: datetime) -> Event:
    return Event.objects.create(
        title="Draft Meetup",
        description="Not validated yet.",
        venue_name="Back Room",
        organizer=organizer,
        start_date=next_week,
        end_date=next_week + timedelta(hours=2),
        ticket_price=Decimal("10.00"),
        total_capacity=5,
    )


def make_db_ticket(event: Event, owner: RegisteredOwner | GuestOwner, quantity: int = 1, **kwargs: t.Any) -> Ticket:
    """Create a ticket row directly, bypassing the purchase flow. Capacity is taken as well."""
    identity = IdentityGenerator()
    ticket_number = identity.ticket_number(datetime.now(UTC))
    validation_code = identity.validation_code()
    defaults: dict[str, t.Any] = {
        "payment_status": "completed",
        "expires_at": event.start_date + timedelta(hours=24),
    }
    defaults.update(kwargs)
    ticket = Ticket(
        event=event,
        ticket_number=ticket_number,
        validation_code=validation_code,
        qr_payload=build_qr_payload(ticket_number, validation_code),
        quantity=quantity,
        unit_price=event.ticket_price,
        total_price=event.ticket_price * quantity,
        **defaults,
    )
    ticket.owner = owner
    ticket.save()
    Event.objects.filter(pk=event.pk).update(available_tickets=event.available_tickets - quantity)
    event.refresh_from_db()
    return ticket


# --- In-memory fixtures ---


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def memory_event() -> Event:
    """An unsaved published event starting in three days, with ten seats at 25.00."""
    start = NOW + timedelta(days=3)
    return Event(
        title="Jazz Night",
        description="Live music.",
        venue_name="Club",
        organizer=User(username="memory.organizer", role=User.Role.ORGANIZER),
        status=Event.EventStatus.PUBLISHED,
        start_date=start,
        end_date=start + timedelta(hours=4),
        ticket_price=Decimal("25.00"),
        total_capacity=10,
        available_tickets=10,
    )


@pytest.fixture
def memory_buyer() -> User:
    return User(username="memory.buyer", first_name="Mia", last_name="Buyer")


@pytest.fixture
def event_store(memory_event: Event) -> InMemoryEventStore:
    return InMemoryEventStore(memory_event)


@pytest.fixture
def ticket_store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def gateway() -> ApprovingGateway:
    return ApprovingGateway()


@pytest.fixture
def purchase_service(
    event_store: InMemoryEventStore, ticket_store: InMemoryTicketStore, gateway: ApprovingGateway, clock: FixedClock
) -> PurchaseService:
    return PurchaseService(
        events=event_store,
        tickets=ticket_store,
        ledger=CapacityLedger(event_store),
        payments=gateway,
        identity=IdentityGenerator(),
        clock=clock,
        max_tickets_per_order=10,
        ticket_expiry_hours=24,
    )


@pytest.fixture
def ticket_service(event_store: InMemoryEventStore, ticket_store: InMemoryTicketStore, clock: FixedClock) -> TicketService:
    return TicketService(
        tickets=ticket_store, ledger=CapacityLedger(event_store), clock=clock, cancellation_window_hours=24
    )
