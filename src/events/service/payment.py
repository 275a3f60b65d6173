"""Payment collaborators.

No real payment provider is integrated: the simulated gateway approves (or declines) every charge
immediately, which is all the purchase flow needs.
"""

from dataclasses import dataclass
from typing import Protocol

import structlog

from events.models import Ticket

from .clock import Clock
from .identity import IdentityGenerator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChargeResult:
    approved: bool
    reference: str = ""
    decline_reason: str = ""


class PaymentGateway(Protocol):
    def charge(self, ticket: Ticket) -> ChargeResult:
        """Charge the ticket's total price to the customer."""
        ...


class SimulatedPaymentGateway:
    def __init__(self, identity: IdentityGenerator, clock: Clock, succeeds: bool = True) -> None:
        self.identity = identity
        self.clock = clock
        self.succeeds = succeeds

    def charge(self, ticket: Ticket) -> ChargeResult:
        if not self.succeeds:
            logger.warning("simulated_payment_declined", ticket_number=ticket.ticket_number)
            return ChargeResult(approved=False, decline_reason="declined")
        reference = self.identity.payment_reference(self.clock.now())
        logger.info(
            "simulated_payment_approved",
            ticket_number=ticket.ticket_number,
            amount=str(ticket.total_price),
            payment_method=ticket.payment_method,
            payment_reference=reference,
        )
        return ChargeResult(approved=True, reference=reference)
