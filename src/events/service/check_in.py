"""Door check-in: turns valid ticket credentials into a single-use admission."""

from dataclasses import dataclass
from datetime import datetime

import structlog
from django.utils import timezone

from accounts.models import User
from events.exceptions import TicketNotFound, TooEarly
from events.models import Event, Ticket, TicketStatus
from events.stores.interfaces import TicketStore

from .clock import Clock
from .identity import parse_qr_payload
from .ticket_lifecycle import TicketAction, TransitionContext, apply

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    ticket: Ticket
    event: Event
    customer_name: str


class CheckInService:
    def __init__(self, tickets: TicketStore, clock: Clock) -> None:
        self.tickets = tickets
        self.clock = clock

    def check_in_ticket(self, ticket_number: str, validation_code: str, actor: User | None = None) -> CheckInResult:
        """Admit the holder of a ticket.

        The ticket must match both credentials, be active and not expired. Any of those failing raises the
        same `TicketNotFound`, so a scanner learns nothing about why credentials were refused. The ticket is
        marked used with a conditional write, so of two scans racing for the same ticket only one admits. Admission
        opens on the day of the event (in the server's time zone) and stays open once the event started.

        Args:
            ticket_number: The ticket number printed on the ticket.
            validation_code: The six character code printed next to it.
            actor: The staff member scanning the ticket, if authenticated.

        Returns:
            CheckInResult: The used ticket, its event and the name to greet the customer with.

        Raises:
            TicketNotFound: if the credentials do not identify a usable ticket.
            TooEarly: if the event is neither today nor already started.
        """
        now = self.clock.now()
        ticket = self.tickets.find_by_number_and_code(ticket_number, validation_code)
        if ticket is None or ticket.status != TicketStatus.ACTIVE:
            logger.warning("ticket_check_in_refused", ticket_number=ticket_number, reason="not_found_or_inactive")
            raise TicketNotFound()
        if ticket.is_expired(now):
            self._expire(ticket, now)
            raise TicketNotFound()

        event = ticket.event
        if not _admission_open(event.start_date, now):
            logger.info("ticket_check_in_too_early", ticket_id=str(ticket.pk), event_id=str(event.pk))
            raise TooEarly()

        transition = apply(ticket, TicketAction.USE, TransitionContext(now=now, actor_id=actor.pk if actor else None))
        if not self.tickets.save_transition(ticket, TicketStatus.ACTIVE, transition.fields):
            logger.warning("ticket_check_in_refused", ticket_number=ticket_number, reason="changed_concurrently")
            raise TicketNotFound()
        logger.info(
            "ticket_checked_in",
            ticket_id=str(ticket.pk),
            event_id=str(event.pk),
            quantity=ticket.quantity,
            checked_in_by=str(actor.pk) if actor else None,
        )
        return CheckInResult(ticket=ticket, event=event, customer_name=ticket.customer_display_name)

    def check_in_qr_payload(self, payload: str, actor: User | None = None) -> CheckInResult:
        """Same as `check_in_ticket`, for the scanned content of a ticket's QR code."""
        ticket_number, validation_code = parse_qr_payload(payload)
        return self.check_in_ticket(ticket_number, validation_code, actor=actor)

    def _expire(self, ticket: Ticket, now: datetime) -> None:
        transition = apply(ticket, TicketAction.EXPIRE, TransitionContext(now=now))
        if not self.tickets.save_transition(ticket, TicketStatus.ACTIVE, transition.fields):
            return
        logger.info("ticket_expired", ticket_id=str(ticket.pk), expires_at=ticket.expires_at.isoformat())


def _admission_open(event_start: datetime, now: datetime) -> bool:
    return timezone.localdate(event_start) == timezone.localdate(now) or event_start <= now
