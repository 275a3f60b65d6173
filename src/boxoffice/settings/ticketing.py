"""Ticket inventory and lifecycle settings."""

from decouple import config

# Upper bound on the quantity of a single purchase.
TICKETING_MAX_TICKETS_PER_ORDER = config("TICKETING_MAX_TICKETS_PER_ORDER", default=10, cast=int)

# Tickets cannot be cancelled once the event starts within this many hours.
TICKETING_CANCELLATION_WINDOW_HOURS = config("TICKETING_CANCELLATION_WINDOW_HOURS", default=24, cast=int)

# A ticket expires this many hours after its event starts.
TICKETING_TICKET_EXPIRY_HOURS = config("TICKETING_TICKET_EXPIRY_HOURS", default=24, cast=int)

# The payment step is simulated; flip this to exercise the declined-payment path.
TICKETING_SIMULATED_PAYMENT_SUCCEEDS = config("TICKETING_SIMULATED_PAYMENT_SUCCEEDS", default=True, cast=bool)
