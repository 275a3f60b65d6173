"""Integration tests for TicketController."""

import typing as t
from datetime import timedelta
from decimal import Decimal

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client
from django.utils import timezone
from freezegun import freeze_time

from accounts.models import User
from events.models import Event, GuestOwner, PaymentStatus, RegisteredOwner, Ticket, TicketStatus

from ..conftest import client_for, make_db_ticket

pytestmark = pytest.mark.django_db

GUEST = GuestOwner(first_name="Gina", last_name="Guest", email="gina@example.com")


def post_json(client: Client, url: str, payload: dict[str, object]) -> t.Any:
    return client.post(url, data=orjson.dumps(payload), content_type="application/json")


class TestPurchase:
    def test_registered_user_purchase(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        response = post_json(
            buyer_client, reverse("api:purchase_ticket"), {"event_id": str(published_event.pk), "quantity": 2}
        )

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["available_tickets"] == 8
        assert data["ticket"]["quantity"] == 2
        assert data["ticket"]["total_price"] == "50.00"
        assert data["ticket"]["status"] == "active"
        assert data["ticket"]["payment_status"] == "completed"
        assert data["ticket"]["customer_name"] == "Bea Buyer"
        assert data["ticket"]["qr_payload"] == f"{data['ticket']['ticket_number']}-{data['ticket']['validation_code']}"
        ticket = Ticket.objects.get(pk=data["ticket"]["id"])
        assert ticket.owner == RegisteredOwner(user_id=buyer.pk)
        published_event.refresh_from_db()
        assert published_event.available_tickets == 8

    def test_guest_purchase(self, client: Client, published_event: Event) -> None:
        payload = {
            "event_id": str(published_event.pk),
            "quantity": 1,
            "customer_info": {"first_name": "Gina", "last_name": "Guest", "email": "gina@example.com"},
            "payment_method": "bank_transfer",
        }

        response = post_json(client, reverse("api:purchase_ticket"), payload)

        assert response.status_code == 201, response.content
        ticket = Ticket.objects.get(pk=response.json()["ticket"]["id"])
        assert ticket.owner == GuestOwner(first_name="Gina", last_name="Guest", email="gina@example.com")
        assert ticket.payment_method == "bank_transfer"

    def test_guest_without_customer_info(self, client: Client, published_event: Event) -> None:
        response = post_json(client, reverse("api:purchase_ticket"), {"event_id": str(published_event.pk)})

        assert response.status_code == 400
        assert response.json()["code"] == "missing_customer_info"

    def test_not_enough_seats(self, buyer_client: Client, published_event: Event) -> None:
        make_db_ticket(published_event, GUEST, quantity=9)

        response = post_json(
            buyer_client, reverse("api:purchase_ticket"), {"event_id": str(published_event.pk), "quantity": 2}
        )

        assert response.status_code == 409
        assert response.json() == {
            "code": "insufficient_capacity",
            "detail": "Only 1 tickets available.",
            "available": 1,
        }

    def test_quantity_above_maximum(self, buyer_client: Client, published_event: Event) -> None:
        response = post_json(
            buyer_client, reverse("api:purchase_ticket"), {"event_id": str(published_event.pk), "quantity": 11}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_quantity"
        assert response.json()["maximum"] == 10

    def test_draft_event(self, buyer_client: Client, draft_event: Event) -> None:
        response = post_json(buyer_client, reverse("api:purchase_ticket"), {"event_id": str(draft_event.pk)})

        assert response.status_code == 400
        assert response.json()["code"] == "event_not_available"

    def test_unknown_event(self, buyer_client: Client, published_event: Event) -> None:
        response = post_json(buyer_client, reverse("api:purchase_ticket"), {"event_id": str(Event().pk)})

        assert response.status_code == 404
        assert response.json()["code"] == "event_not_found"

    def test_declined_payment(self, buyer_client: Client, published_event: Event, settings: t.Any) -> None:
        settings.TICKETING_SIMULATED_PAYMENT_SUCCEEDS = False

        response = post_json(
            buyer_client, reverse("api:purchase_ticket"), {"event_id": str(published_event.pk), "quantity": 3}
        )

        assert response.status_code == 402
        assert response.json()["code"] == "payment_failed"
        assert not Ticket.objects.exists()
        published_event.refresh_from_db()
        assert published_event.available_tickets == 10


class TestMyTickets:
    def test_list_only_own_tickets(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        own = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))
        make_db_ticket(published_event, GUEST)

        response = buyer_client.get(reverse("api:my_tickets"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["id"] == str(own.pk)
        assert data["results"][0]["validation_code"] == own.validation_code
        assert data["results"][0]["event"]["title"] == "Tech Summit"

    def test_filter_by_status(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))
        make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), status=TicketStatus.USED)

        response = buyer_client.get(reverse("api:my_tickets"), {"status": "used"})

        assert response.json()["count"] == 1
        assert response.json()["results"][0]["status"] == "used"

    def test_get_own_ticket(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        response = buyer_client.get(reverse("api:my_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 200
        assert response.json()["ticket_number"] == ticket.ticket_number

    def test_other_users_ticket_is_not_found(
        self, organizer_client: Client, buyer: User, published_event: Event
    ) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        response = organizer_client.get(reverse("api:my_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 404

    def test_requires_authentication(self, client: Client) -> None:
        assert client.get(reverse("api:my_tickets")).status_code == 401


class TestCancelAndRefund:
    def test_cancel(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=2)

        response = buyer_client.post(reverse("api:cancel_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["payment_status"] == "refunded"
        assert Decimal(response.json()["refund_amount"]) == Decimal("50.00")
        published_event.refresh_from_db()
        assert published_event.available_tickets == 10

    def test_cancel_inside_the_window(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        start = timezone.now() + timedelta(hours=10)
        Event.objects.filter(pk=published_event.pk).update(start_date=start, end_date=start + timedelta(hours=2))
        published_event.refresh_from_db()
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        response = buyer_client.post(reverse("api:cancel_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "cancellation_window_closed"
        assert 9.9 <= data["hours_until_event"] <= 10.0
        ticket.refresh_from_db()
        assert ticket.status == TicketStatus.ACTIVE

    def test_cancel_someone_elses_ticket(self, organizer_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        response = organizer_client.post(reverse("api:cancel_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 404
        assert response.json()["code"] == "ticket_not_found"

    def test_refund_by_admin(self, platform_admin_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk), quantity=3)

        response = platform_admin_client.post(reverse("api:refund_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 200
        assert response.json()["status"] == "refunded"
        published_event.refresh_from_db()
        assert published_event.available_tickets == 10

    def test_refund_is_admin_only(self, buyer_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        response = buyer_client.post(reverse("api:refund_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 403

    def test_refund_unpaid_ticket(self, platform_admin_client: Client, buyer: User, published_event: Event) -> None:
        ticket = make_db_ticket(
            published_event, RegisteredOwner(user_id=buyer.pk), payment_status=PaymentStatus.PENDING
        )

        response = platform_admin_client.post(reverse("api:refund_ticket", kwargs={"ticket_id": ticket.pk}))

        assert response.status_code == 400
        assert response.json()["code"] == "ticket_not_refundable"


class TestCheckIn:
    def test_check_in_on_event_day(self, client: Client, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, GUEST, quantity=2)

        with freeze_time(published_event.start_date - timedelta(hours=2)):
            response = post_json(client, reverse("api:check_in_ticket"), {"qr_payload": ticket.qr_payload})

        assert response.status_code == 200, response.content
        data = response.json()
        assert data["customer"] == "Gina Guest"
        assert data["ticket"]["quantity"] == 2
        assert data["event"]["id"] == str(published_event.pk)
        ticket.refresh_from_db()
        assert ticket.status == TicketStatus.USED

    def test_staff_member_is_recorded(self, published_event: Event, organizer: User, buyer: User) -> None:
        ticket = make_db_ticket(published_event, RegisteredOwner(user_id=buyer.pk))

        with freeze_time(published_event.start_date + timedelta(minutes=30)):
            response = post_json(
                client_for(organizer),
                reverse("api:check_in_ticket"),
                {"ticket_number": ticket.ticket_number, "validation_code": ticket.validation_code},
            )

        assert response.status_code == 200, response.content
        assert response.json()["customer"] == "Bea Buyer"
        ticket.refresh_from_db()
        assert ticket.used_by == organizer

    def test_second_check_in_is_not_found(self, client: Client, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, GUEST)

        with freeze_time(published_event.start_date):
            post_json(client, reverse("api:check_in_ticket"), {"qr_payload": ticket.qr_payload})
            response = post_json(client, reverse("api:check_in_ticket"), {"qr_payload": ticket.qr_payload})

        assert response.status_code == 404
        assert response.json()["code"] == "ticket_not_found"

    def test_too_early(self, client: Client, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, GUEST)

        response = post_json(client, reverse("api:check_in_ticket"), {"qr_payload": ticket.qr_payload})

        assert response.status_code == 400
        assert response.json()["code"] == "check_in_too_early"

    def test_expired_ticket(self, client: Client, published_event: Event) -> None:
        ticket = make_db_ticket(published_event, GUEST)

        with freeze_time(ticket.expires_at + timedelta(minutes=1)):
            response = post_json(client, reverse("api:check_in_ticket"), {"qr_payload": ticket.qr_payload})

        assert response.status_code == 404
        ticket.refresh_from_db()
        assert ticket.status == TicketStatus.EXPIRED

    def test_credentials_are_required(self, client: Client) -> None:
        response = post_json(client, reverse("api:check_in_ticket"), {"ticket_number": "TKT-1-ABCDEFGHI"})

        assert response.status_code == 422
