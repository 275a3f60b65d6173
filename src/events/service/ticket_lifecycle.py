"""Ticket lifecycle state machine.

A ticket is created ``active`` with a ``pending`` payment. Every later change goes through `apply`,
which looks the action up in `TRANSITIONS`, checks the guards and mutates the ticket. Whether capacity
must be given back is part of the table; releasing it is up to the caller. So is persisting: each
transition names the fields it writes, for `TicketStore.save_transition`.
"""

import typing as t
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from events.exceptions import Expired, NotActive, NotCancellable, NotRefundable, TicketingError
from events.models import PaymentStatus, Ticket, TicketStatus


class TicketAction(StrEnum):
    CONFIRM_PAYMENT = "confirm_payment"
    FAIL_PAYMENT = "fail_payment"
    CANCEL = "cancel"
    REFUND = "refund"
    USE = "use"
    EXPIRE = "expire"


@dataclass(frozen=True)
class TransitionContext:
    now: datetime
    actor_id: UUID | None = None
    payment_reference: str = ""


@dataclass(frozen=True)
class Transition:
    from_statuses: frozenset[TicketStatus]
    from_payment_statuses: frozenset[PaymentStatus] | None
    effect: t.Callable[[Ticket, TransitionContext], None]
    fields: tuple[str, ...]
    releases_capacity: bool
    error: type[TicketingError]


def _confirm_payment(ticket: Ticket, context: TransitionContext) -> None:
    ticket.payment_status = PaymentStatus.COMPLETED
    ticket.payment_reference = context.payment_reference


def _fail_payment(ticket: Ticket, context: TransitionContext) -> None:
    ticket.payment_status = PaymentStatus.FAILED


def _cancel(ticket: Ticket, context: TransitionContext) -> None:
    ticket.status = TicketStatus.CANCELLED
    if ticket.payment_status == PaymentStatus.COMPLETED:
        ticket.payment_status = PaymentStatus.REFUNDED


def _refund(ticket: Ticket, context: TransitionContext) -> None:
    ticket.status = TicketStatus.REFUNDED
    ticket.payment_status = PaymentStatus.REFUNDED


def _use(ticket: Ticket, context: TransitionContext) -> None:
    ticket.status = TicketStatus.USED
    ticket.used_at = context.now
    ticket.used_by_id = context.actor_id


def _expire(ticket: Ticket, context: TransitionContext) -> None:
    ticket.status = TicketStatus.EXPIRED


ACTIVE = frozenset({TicketStatus.ACTIVE})

TRANSITIONS: dict[TicketAction, Transition] = {
    TicketAction.CONFIRM_PAYMENT: Transition(
        ACTIVE,
        frozenset({PaymentStatus.PENDING}),
        _confirm_payment,
        fields=("payment_status", "payment_reference"),
        releases_capacity=False,
        error=NotActive,
    ),
    TicketAction.FAIL_PAYMENT: Transition(
        ACTIVE,
        frozenset({PaymentStatus.PENDING}),
        _fail_payment,
        fields=("payment_status",),
        releases_capacity=True,
        error=NotActive,
    ),
    TicketAction.CANCEL: Transition(
        ACTIVE, None, _cancel, fields=("status", "payment_status"), releases_capacity=True, error=NotCancellable
    ),
    TicketAction.REFUND: Transition(
        ACTIVE,
        frozenset({PaymentStatus.COMPLETED}),
        _refund,
        fields=("status", "payment_status"),
        releases_capacity=True,
        error=NotRefundable,
    ),
    TicketAction.USE: Transition(
        ACTIVE, None, _use, fields=("status", "used_at", "used_by"), releases_capacity=False, error=NotActive
    ),
    TicketAction.EXPIRE: Transition(ACTIVE, None, _expire, fields=("status",), releases_capacity=False, error=NotActive),
}


def can_apply(ticket: Ticket, action: TicketAction) -> bool:
    """Whether the ticket's current state allows the action (time-based guards aside)."""
    transition = TRANSITIONS[action]
    if ticket.status not in transition.from_statuses:
        return False
    return transition.from_payment_statuses is None or ticket.payment_status in transition.from_payment_statuses


def apply(ticket: Ticket, action: TicketAction, context: TransitionContext) -> Transition:
    """Apply an action to the ticket in place.

    Returns:
        The transition that was applied; `releases_capacity` tells the caller to give the seats back.

    Raises:
        The transition's error if the ticket is not in a state that allows the action.
        Expired: when using a ticket past its expiry.
    """
    transition = TRANSITIONS[action]
    if not can_apply(ticket, action):
        raise transition.error()
    if action == TicketAction.USE and ticket.is_expired(context.now):
        raise Expired()
    if action == TicketAction.EXPIRE and not ticket.is_expired(context.now):
        raise NotActive("Ticket has not expired yet.")
    transition.effect(ticket, context)
    return transition
