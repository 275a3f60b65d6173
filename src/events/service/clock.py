from datetime import datetime
from typing import Protocol

from django.utils import timezone


class Clock(Protocol):
    """Source of the current time for the ticketing services."""

    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return timezone.now()
