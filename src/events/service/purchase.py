"""Ticket purchase: reservation, ticket creation and payment as one logical operation."""

from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

import structlog

from accounts.models import User
from events.exceptions import (
    EventAlreadyStarted,
    EventNotAvailable,
    EventNotFound,
    InsufficientCapacity,
    InvalidQuantity,
    MissingCustomerInfo,
    NotActive,
    PaymentFailed,
)
from events.models import Event, GuestOwner, Owner, PaymentMethod, RegisteredOwner, Ticket, TicketStatus
from events.stores.interfaces import EventStore, TicketStore

from .capacity_ledger import CapacityLedger
from .clock import Clock
from .identity import IdentityGenerator, build_qr_payload
from .payment import PaymentGateway
from .ticket_lifecycle import TicketAction, TransitionContext, apply

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CustomerInfo:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.first_name and self.last_name and self.email)


@dataclass(frozen=True)
class PurchaseResult:
    ticket: Ticket
    available_tickets: int


class PurchaseService:
    def __init__(
        self,
        *,
        events: EventStore,
        tickets: TicketStore,
        ledger: CapacityLedger,
        payments: PaymentGateway,
        identity: IdentityGenerator,
        clock: Clock,
        max_tickets_per_order: int,
        ticket_expiry_hours: int,
    ) -> None:
        self.events = events
        self.tickets = tickets
        self.ledger = ledger
        self.payments = payments
        self.identity = identity
        self.clock = clock
        self.max_tickets_per_order = max_tickets_per_order
        self.ticket_expiry_hours = ticket_expiry_hours

    def purchase_ticket(
        self,
        event_id: UUID,
        quantity: int,
        actor: User | None,
        customer_info: CustomerInfo | None = None,
        special_requests: str | None = None,
        payment_method: PaymentMethod = PaymentMethod.CARD,
    ) -> PurchaseResult:
        """Buy `quantity` seats of an event.

        Seats are reserved before the ticket is written and given back if anything after the reservation
        fails, so a failed purchase never holds capacity.

        Args:
            event_id: The event to buy seats for.
            quantity: Number of seats, at most the configured maximum per order.
            actor: The authenticated buyer, or None for a guest purchase.
            customer_info: Required for guests: first name, last name and email.
            special_requests: Free text passed on to the organizer.
            payment_method: How the customer pays.

        Returns:
            PurchaseResult: The paid ticket and the event's remaining availability.

        Raises:
            InvalidQuantity, EventNotFound, EventNotAvailable, EventAlreadyStarted, InsufficientCapacity,
            MissingCustomerInfo, PaymentFailed.
            NotActive: if the ticket was cancelled before its payment was recorded.
        """
        if not 1 <= quantity <= self.max_tickets_per_order:
            raise InvalidQuantity(quantity, self.max_tickets_per_order)

        event = self.events.find_by_id(event_id)
        if event is None:
            raise EventNotFound()
        if event.status != Event.EventStatus.PUBLISHED:
            raise EventNotAvailable()
        now = self.clock.now()
        if event.start_date <= now:
            raise EventAlreadyStarted()
        if event.available_tickets < quantity:
            raise InsufficientCapacity(event.available_tickets)
        owner = self._resolve_owner(actor, customer_info)

        logger.info(
            "ticket_purchase_started",
            event_id=str(event.pk),
            quantity=quantity,
            user_id=str(actor.pk) if actor else None,
        )
        self.ledger.reserve(event, quantity)
        ticket: Ticket | None = None
        try:
            ticket = self.tickets.create(
                self._build_ticket(event, quantity, owner, special_requests, payment_method)
            )
            charge = self.payments.charge(ticket)
            if not charge.approved:
                failed = apply(ticket, TicketAction.FAIL_PAYMENT, TransitionContext(now=self.clock.now()))
                if not self.tickets.save_transition(ticket, TicketStatus.ACTIVE, failed.fields):
                    raise NotActive()
                logger.warning(
                    "ticket_purchase_payment_failed",
                    event_id=str(event.pk),
                    ticket_number=ticket.ticket_number,
                    reason=charge.decline_reason,
                )
                raise PaymentFailed(reason=charge.decline_reason)
            transition = apply(
                ticket,
                TicketAction.CONFIRM_PAYMENT,
                TransitionContext(now=self.clock.now(), payment_reference=charge.reference),
            )
            if not self.tickets.save_transition(ticket, TicketStatus.ACTIVE, transition.fields):
                raise NotActive()
        except PaymentFailed:
            self._abandon(event, quantity, ticket)
            raise
        except NotActive:
            # Cancelled while the payment was running; the cancellation already gave the seats back.
            logger.warning("ticket_purchase_superseded", event_id=str(event.pk), quantity=quantity)
            raise
        except Exception:
            logger.exception("ticket_purchase_aborted", event_id=str(event.pk), quantity=quantity)
            self._abandon(event, quantity, ticket)
            raise

        logger.info(
            "ticket_purchase_completed",
            event_id=str(event.pk),
            ticket_id=str(ticket.pk),
            ticket_number=ticket.ticket_number,
            quantity=quantity,
            total_price=str(ticket.total_price),
            available=event.available_tickets,
        )
        return PurchaseResult(ticket=ticket, available_tickets=event.available_tickets)

    def _abandon(self, event: Event, quantity: int, ticket: Ticket | None) -> None:
        """Undo a reservation. The seats are given back even if removing the pending ticket fails."""
        try:
            if ticket is not None:
                self.tickets.delete(ticket)
        finally:
            self.ledger.release(event, quantity)

    def _resolve_owner(self, actor: User | None, customer_info: CustomerInfo | None) -> Owner:
        if actor is not None:
            return RegisteredOwner(user_id=actor.pk)
        if customer_info is None or not customer_info.is_complete:
            raise MissingCustomerInfo()
        return GuestOwner(
            first_name=customer_info.first_name,
            last_name=customer_info.last_name,
            email=customer_info.email,
            phone=customer_info.phone,
        )

    def _build_ticket(
        self,
        event: Event,
        quantity: int,
        owner: Owner,
        special_requests: str | None,
        payment_method: PaymentMethod,
    ) -> Ticket:
        now = self.clock.now()
        ticket_number = self.identity.ticket_number(now)
        validation_code = self.identity.validation_code()
        ticket = Ticket(
            event=event,
            ticket_number=ticket_number,
            validation_code=validation_code,
            qr_payload=build_qr_payload(ticket_number, validation_code),
            quantity=quantity,
            unit_price=event.ticket_price,
            total_price=event.ticket_price * quantity,
            payment_method=payment_method,
            expires_at=event.start_date + timedelta(hours=self.ticket_expiry_hours),
            special_requests=special_requests or "",
        )
        ticket.owner = owner
        return ticket
