import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import User
from events.models import Event, RegisteredOwner

from .conftest import make_db_ticket

pytestmark = pytest.mark.django_db


def test_event_changelist(admin_client: Client, published_event: Event) -> None:
    response = admin_client.get(reverse("admin:events_event_changelist"))

    assert response.status_code == 200
    assert b"Tech Summit" in response.content


def test_ticket_changelist(admin_client: Client, published_event: Event, buyer: User) -> None:
    ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

    response = admin_client.get(reverse("admin:events_ticket_changelist"))

    assert response.status_code == 200
    assert ticket.ticket_number.encode() in response.content


def test_event_change_page(admin_client: Client, published_event: Event) -> None:
    response = admin_client.get(reverse("admin:events_event_change", args=[published_event.pk]))

    assert response.status_code == 200


def test_capacity_cannot_be_edited_in_admin(admin_client: Client, published_event: Event, buyer: User) -> None:
    make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=3)

    response = admin_client.get(reverse("admin:events_event_change", args=[published_event.pk]))

    assert response.status_code == 200
    assert b'name="total_capacity"' not in response.content


def test_capacity_is_editable_when_adding(admin_client: Client) -> None:
    response = admin_client.get(reverse("admin:events_event_add"))

    assert response.status_code == 200
    assert b'name="total_capacity"' in response.content


def test_ticket_state_cannot_be_edited_in_admin(admin_client: Client, published_event: Event, buyer: User) -> None:
    ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=3)

    response = admin_client.get(reverse("admin:events_ticket_change", args=[ticket.pk]))

    assert response.status_code == 200
    for field in ("status", "payment_status", "quantity", "event"):
        assert f'name="{field}"'.encode() not in response.content


def test_tickets_cannot_be_added_in_admin(admin_client: Client) -> None:
    response = admin_client.get(reverse("admin:events_ticket_add"))

    assert response.status_code == 403
