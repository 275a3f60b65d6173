"""Wiring of the ticketing services with their production collaborators."""

from django.conf import settings

from events.stores.django_store import DjangoEventStore, DjangoTicketStore

from .capacity_ledger import CapacityLedger
from .check_in import CheckInService
from .clock import SystemClock
from .identity import IdentityGenerator
from .payment import SimulatedPaymentGateway
from .purchase import PurchaseService
from .ticket_service import TicketService


def build_purchase_service() -> PurchaseService:
    events = DjangoEventStore()
    clock = SystemClock()
    identity = IdentityGenerator()
    return PurchaseService(
        events=events,
        tickets=DjangoTicketStore(),
        ledger=CapacityLedger(events),
        payments=SimulatedPaymentGateway(identity, clock, succeeds=settings.TICKETING_SIMULATED_PAYMENT_SUCCEEDS),
        identity=identity,
        clock=clock,
        max_tickets_per_order=settings.TICKETING_MAX_TICKETS_PER_ORDER,
        ticket_expiry_hours=settings.TICKETING_TICKET_EXPIRY_HOURS,
    )


def build_ticket_service() -> TicketService:
    return TicketService(
        tickets=DjangoTicketStore(),
        ledger=CapacityLedger(DjangoEventStore()),
        clock=SystemClock(),
        cancellation_window_hours=settings.TICKETING_CANCELLATION_WINDOW_HOURS,
    )


def build_check_in_service() -> CheckInService:
    return CheckInService(tickets=DjangoTicketStore(), clock=SystemClock())
