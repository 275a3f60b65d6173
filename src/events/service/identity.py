"""Ticket credentials and payment references.

Ticket numbers look like ``TKT-<ms timestamp>-<9 upper alnum>``, validation codes are 6 upper alnum
characters and the QR payload joins both with a dash. Ticket numbers contain dashes themselves, so
a payload is always split on its last dash.
"""

import secrets
import string
from datetime import datetime

from events.exceptions import TicketNotFound

UPPER_ALPHANUMERIC = string.ascii_uppercase + string.digits
LOWER_ALPHANUMERIC = string.ascii_lowercase + string.digits

VALIDATION_CODE_LENGTH = 6


def _random_string(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class IdentityGenerator:
    """Generates the identifiers handed out with a ticket."""

    def ticket_number(self, now: datetime) -> str:
        return f"TKT-{_millis(now)}-{_random_string(UPPER_ALPHANUMERIC, 9)}"

    def validation_code(self) -> str:
        return _random_string(UPPER_ALPHANUMERIC, VALIDATION_CODE_LENGTH)

    def payment_reference(self, now: datetime) -> str:
        return f"PAY_{_millis(now)}_{_random_string(LOWER_ALPHANUMERIC, 9)}"


def build_qr_payload(ticket_number: str, validation_code: str) -> str:
    return f"{ticket_number}-{validation_code}"


def parse_qr_payload(payload: str) -> tuple[str, str]:
    """Split a QR payload into ticket number and validation code.

    Raises:
        TicketNotFound: if the payload is malformed. Check-in never tells why credentials are rejected.
    """
    ticket_number, separator, validation_code = payload.strip().rpartition("-")
    if not separator or not ticket_number or len(validation_code) != VALIDATION_CODE_LENGTH:
        raise TicketNotFound()
    return ticket_number, validation_code
