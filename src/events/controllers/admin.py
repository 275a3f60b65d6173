import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import ContextJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle
from events import models, schema
from events.service import event_service

from .permissions import IsAdmin


@api_controller("/admin/events", auth=ContextJWTAuth(), permissions=[IsAdmin()], tags=["Admin"])
class EventModerationController(UserAwareController):
    """Review of events submitted by organizers."""

    def get_one(self, event_id: UUID) -> models.Event:
        return t.cast(
            models.Event, self.get_object_or_exception(models.Event.objects.with_organizer(), pk=event_id)
        )

    @route.get("/pending", url_name="pending_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_pending_events(self) -> QuerySet[models.Event]:
        """Drafts waiting for validation, oldest submission first."""
        return (
            models.Event.objects.with_organizer()
            .filter(is_validated=False, status=models.Event.EventStatus.DRAFT)
            .order_by("created_at")
        )

    @route.post(
        "/{event_id}/validate", url_name="validate_event", response=schema.EventSchema, throttle=WriteThrottle()
    )
    def validate_event(self, event_id: UUID) -> models.Event:
        """Approve an event. It is published and tickets go on sale."""
        return event_service.validate_event(self.get_one(event_id), self.user())

    @route.post("/{event_id}/reject", url_name="reject_event", response=schema.EventSchema, throttle=WriteThrottle())
    def reject_event(self, event_id: UUID, payload: schema.RejectEventSchema) -> models.Event:
        """Refuse an event. It is cancelled."""
        return event_service.reject_event(self.get_one(event_id), self.user(), reason=payload.reason)
