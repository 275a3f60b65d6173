from .admin import EventModerationController
from .events import EventController
from .tickets import TicketController

__all__ = ["EventController", "EventModerationController", "TicketController"]
