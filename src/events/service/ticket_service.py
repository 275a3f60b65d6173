from uuid import UUID

import structlog

from accounts.models import User
from events.exceptions import CancellationWindowClosed, NotCancellable, TicketNotFound
from events.models import Ticket
from events.stores.interfaces import TicketStore

from .capacity_ledger import CapacityLedger
from .clock import Clock
from .ticket_lifecycle import TicketAction, TransitionContext, apply, can_apply

logger = structlog.get_logger(__name__)


class TicketService:
    """Cancellation and refund of existing tickets."""

    def __init__(
        self, *, tickets: TicketStore, ledger: CapacityLedger, clock: Clock, cancellation_window_hours: int
    ) -> None:
        self.tickets = tickets
        self.ledger = ledger
        self.clock = clock
        self.cancellation_window_hours = cancellation_window_hours

    def cancel_ticket(self, ticket_id: UUID, actor: User) -> Ticket:
        """Cancel one of the actor's own tickets and give its seats back.

        A completed payment is marked refunded. Tickets of other users are reported as not found.

        Raises:
            TicketNotFound: if the ticket does not exist or belongs to someone else.
            NotCancellable: if the ticket is not active.
            CancellationWindowClosed: if the event starts within the cancellation window.
        """
        ticket = self.tickets.find_by_id(ticket_id)
        if ticket is None or not ticket.is_owned_by(actor.pk):
            raise TicketNotFound()
        if not can_apply(ticket, TicketAction.CANCEL):
            raise NotCancellable()

        now = self.clock.now()
        hours_until_event = (ticket.event.start_date - now).total_seconds() / 3600
        if hours_until_event < self.cancellation_window_hours:
            logger.info(
                "ticket_cancellation_refused",
                ticket_id=str(ticket.pk),
                hours_until_event=round(hours_until_event, 1),
            )
            raise CancellationWindowClosed(round(hours_until_event, 1), self.cancellation_window_hours)

        return self._transition_and_release(ticket, TicketAction.CANCEL, TransitionContext(now=now, actor_id=actor.pk))

    def refund_ticket(self, ticket_id: UUID, actor: User) -> Ticket:
        """Refund a paid, active ticket and give its seats back.

        Who may refund is decided by the caller; this is an administrator operation.

        Raises:
            TicketNotFound: if the ticket does not exist.
            NotRefundable: unless the ticket is active and paid.
        """
        ticket = self.tickets.find_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFound()
        return self._transition_and_release(
            ticket, TicketAction.REFUND, TransitionContext(now=self.clock.now(), actor_id=actor.pk)
        )

    def _transition_and_release(self, ticket: Ticket, action: TicketAction, context: TransitionContext) -> Ticket:
        previous_status = ticket.status
        transition = apply(ticket, action, context)
        if not self.tickets.save_transition(ticket, previous_status, transition.fields):
            # The ticket changed since it was loaded, e.g. it was checked in meanwhile.
            logger.warning("ticket_transition_superseded", action=str(action), ticket_id=str(ticket.pk))
            raise transition.error()
        if transition.releases_capacity:
            self.ledger.release(ticket.event, ticket.quantity)
        logger.info(
            "ticket_transition_completed",
            action=str(action),
            ticket_id=str(ticket.pk),
            event_id=str(ticket.event_id),
            quantity=ticket.quantity,
            actor_id=str(context.actor_id),
            refund_amount=str(ticket.refund_amount),
        )
        return ticket
