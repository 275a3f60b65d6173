import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import api_controller, route, status
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import ContextJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.throttling import CheckInThrottle, PurchaseThrottle, UserDefaultThrottle, WriteThrottle
from events import filters, models, schema
from events.service.factory import build_check_in_service, build_purchase_service, build_ticket_service
from events.service.purchase import CustomerInfo

from .permissions import IsAdmin


@api_controller("/tickets", auth=ContextJWTAuth(), tags=["Tickets"])
class TicketController(UserAwareController):
    @route.post(
        "/purchase",
        url_name="purchase_ticket",
        response={201: schema.PurchaseResponseSchema},
        auth=OptionalAuth(),
        throttle=PurchaseThrottle(),
    )
    def purchase_ticket(self, payload: schema.TicketPurchaseSchema) -> tuple[int, schema.PurchaseResponseSchema]:
        """Buy seats for a published event that has not started yet.

        Works with or without an account. Without one, `customer_info` (first name, last name, email) is
        required. The response contains the ticket number and validation code needed at the door, plus the
        event's remaining availability. Returns 409 when not enough seats are left and 402 when the payment
        is declined; in both cases nothing is charged or reserved.
        """
        customer_info = CustomerInfo(**payload.customer_info.model_dump()) if payload.customer_info else None
        result = build_purchase_service().purchase_ticket(
            event_id=payload.event_id,
            quantity=payload.quantity,
            actor=self.maybe_actor(),
            customer_info=customer_info,
            special_requests=payload.special_requests,
            payment_method=payload.payment_method,
        )
        return status.HTTP_201_CREATED, schema.PurchaseResponseSchema(
            ticket=schema.TicketSchema.from_orm(result.ticket),
            available_tickets=result.available_tickets,
        )

    @route.get(
        "/mine",
        url_name="my_tickets",
        response=PaginatedResponseSchema[schema.TicketSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_my_tickets(
        self,
        params: filters.TicketFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Ticket]:
        """List the authenticated user's tickets, newest first."""
        return params.filter(models.Ticket.objects.full().owned_by(self.user().id))

    @route.get("/mine/{ticket_id}", url_name="my_ticket", response=schema.TicketSchema, throttle=UserDefaultThrottle())
    def get_my_ticket(self, ticket_id: UUID) -> models.Ticket:
        """Retrieve one of the authenticated user's tickets."""
        return t.cast(
            models.Ticket,
            self.get_object_or_exception(models.Ticket.objects.full().owned_by(self.user().id), pk=ticket_id),
        )

    @route.post("/{ticket_id}/cancel", url_name="cancel_ticket", response=schema.TicketSchema, throttle=WriteThrottle())
    def cancel_ticket(self, ticket_id: UUID) -> models.Ticket:
        """Cancel one of your tickets and free its seats.

        Only active tickets can be cancelled, and not within the last hours before the event starts
        (the response then says how many hours are left). A paid ticket is marked refunded.
        """
        return build_ticket_service().cancel_ticket(ticket_id, self.user())

    @route.post(
        "/{ticket_id}/refund",
        url_name="refund_ticket",
        response=schema.TicketSchema,
        permissions=[IsAdmin()],
        throttle=WriteThrottle(),
    )
    def refund_ticket(self, ticket_id: UUID) -> models.Ticket:
        """Refund a paid, active ticket and free its seats. Administrators only."""
        return build_ticket_service().refund_ticket(ticket_id, self.user())

    @route.post(
        "/check-in",
        url_name="check_in_ticket",
        response=schema.CheckInResponseSchema,
        auth=OptionalAuth(),
        throttle=CheckInThrottle(),
    )
    def check_in_ticket(self, payload: schema.CheckInRequestSchema) -> schema.CheckInResponseSchema:
        """Admit a ticket holder at the door.

        Send either the scanned `qr_payload` or the printed `ticket_number` and `validation_code`. A ticket
        can be used once, on the day of the event or after it started. Unknown, used, cancelled and expired
        tickets all answer the same 404.
        """
        service = build_check_in_service()
        actor = self.maybe_actor()
        if payload.qr_payload:
            result = service.check_in_qr_payload(payload.qr_payload, actor=actor)
        else:
            result = service.check_in_ticket(
                t.cast(str, payload.ticket_number), t.cast(str, payload.validation_code), actor=actor
            )
        return schema.CheckInResponseSchema(
            ticket=schema.CheckedInTicketSchema(
                id=result.ticket.pk,
                ticket_number=result.ticket.ticket_number,
                quantity=result.ticket.quantity,
                used_at=result.ticket.used_at,
            ),
            event=schema.MinimalEventSchema.from_orm(result.event),
            customer=result.customer_name,
        )
