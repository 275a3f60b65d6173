import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route, status
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import ContextJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.schema import ResponseMessage
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import filters, models, schema
from events.service import event_service

from .permissions import EventOwnerOrAdmin, IsOrganizer


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventController(UserAwareController):
    def get_queryset(self) -> models.event.EventQuerySet:
        """Get the queryset based on the user."""
        return models.Event.objects.with_organizer().for_user(self.maybe_user())

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    def get_managed(self, event_id: UUID) -> models.Event:
        """Fetch an event the user manages; checks the route's object permissions."""
        return t.cast(
            models.Event, self.get_object_or_exception(models.Event.objects.with_organizer(), pk=event_id)
        )

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """Browse events, soonest first.

        Anonymous visitors and regular users see published events; organizers additionally see their own
        drafts. By default only upcoming events are listed; pass `upcoming=false` to include past ones.
        """
        return params.filter(self.get_queryset())

    @route.get("/{event_id}", url_name="get_event", response=schema.EventSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Retrieve an event with its price and remaining availability."""
        return self.get_one(event_id)

    @route.post(
        "/",
        url_name="create_event",
        response={201: schema.EventSchema},
        auth=ContextJWTAuth(),
        permissions=[IsOrganizer()],
        throttle=WriteThrottle(),
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event.

        Organizers' events start as drafts and only go on sale once an administrator validated them.
        """
        return status.HTTP_201_CREATED, event_service.create_event(self.user(), payload)

    @route.post(
        "/{event_id}/cancel",
        url_name="cancel_event",
        response=schema.EventSchema,
        auth=ContextJWTAuth(),
        permissions=[EventOwnerOrAdmin()],
        throttle=WriteThrottle(),
    )
    def cancel_event(self, event_id: UUID) -> models.Event:
        """Stop selling tickets for an event. Sold tickets are kept."""
        return event_service.cancel_event(self.get_managed(event_id), self.user())

    @route.delete(
        "/{event_id}",
        url_name="delete_event",
        response=ResponseMessage,
        auth=ContextJWTAuth(),
        permissions=[EventOwnerOrAdmin()],
        throttle=WriteThrottle(),
    )
    def delete_event(self, event_id: UUID) -> ResponseMessage:
        """Delete an event.

        Administrators delete it for good. Organizers can only remove events without sold tickets, which
        cancels them; events with sold tickets answer 409.
        """
        deleted = event_service.delete_event(self.get_managed(event_id), self.user())
        return ResponseMessage(message="Event deleted successfully." if deleted else "Event cancelled successfully.")

    @route.get(
        "/{event_id}/stats",
        url_name="event_stats",
        response=schema.EventStatisticsSchema,
        auth=ContextJWTAuth(),
        permissions=[EventOwnerOrAdmin()],
        throttle=UserDefaultThrottle(),
    )
    def get_event_stats(self, event_id: UUID) -> schema.EventStatisticsSchema:
        """Sales figures: sold seats, attendance rate, revenue and a breakdown per ticket status."""
        return event_service.get_event_stats(self.get_managed(event_id))

    @route.get(
        "/{event_id}/tickets",
        url_name="event_tickets",
        response=PaginatedResponseSchema[schema.EventTicketSchema],
        auth=ContextJWTAuth(),
        permissions=[EventOwnerOrAdmin()],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_event_tickets(
        self,
        event_id: UUID,
        params: filters.TicketFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Ticket]:
        """List the tickets sold for an event, newest first."""
        event = self.get_managed(event_id)
        return params.filter(models.Ticket.objects.with_user().filter(event=event))
