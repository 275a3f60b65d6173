import typing as t
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, EmailStr, Field, StringConstraints, model_validator

from accounts.schema import MinimalUserSchema
from common.schema import StrippedString
from events.models import Event, EventCategory, PaymentMethod, PaymentStatus, Ticket, TicketStatus

NameString = t.Annotated[str, StringConstraints(min_length=2, max_length=50, strip_whitespace=True)]


class EventCreateSchema(Schema):
    title: t.Annotated[str, StringConstraints(min_length=1, max_length=200, strip_whitespace=True)]
    description: t.Annotated[str, StringConstraints(min_length=1, max_length=2000, strip_whitespace=True)]
    category: EventCategory = EventCategory.OTHER
    venue_name: t.Annotated[str, StringConstraints(min_length=1, max_length=100, strip_whitespace=True)]
    city: t.Annotated[str, StringConstraints(max_length=100, strip_whitespace=True)] = ""
    start_date: AwareDatetime
    end_date: AwareDatetime
    ticket_price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    total_capacity: int = Field(..., ge=1)

    @model_validator(mode="after")
    def validate_schedule(self) -> t.Self:
        """Validate that the event ends after it starts."""
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date.")
        return self


class MinimalEventSchema(ModelSchema):
    status: Event.EventStatus

    class Meta:
        model = Event
        fields = ["id", "title", "venue_name", "city", "start_date", "end_date", "status"]


class EventSchema(ModelSchema):
    organizer: MinimalUserSchema
    status: Event.EventStatus
    category: EventCategory
    sold_tickets: int

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "category",
            "venue_name",
            "city",
            "status",
            "start_date",
            "end_date",
            "ticket_price",
            "total_capacity",
            "available_tickets",
            "is_validated",
            "validated_at",
            "created_at",
            "updated_at",
        ]


class TicketStatusBreakdownSchema(Schema):
    tickets: int
    seats: int
    revenue: Decimal


class EventStatisticsSchema(Schema):
    total_capacity: int
    sold_tickets: int
    available_tickets: int
    attendance_rate: float = Field(..., description="Sold seats as a percentage of the capacity.")
    total_revenue: Decimal
    status_breakdown: dict[str, TicketStatusBreakdownSchema]


class RejectEventSchema(Schema):
    reason: t.Annotated[str, StringConstraints(max_length=500, strip_whitespace=True)] = ""


class CustomerInfoSchema(Schema):
    first_name: NameString
    last_name: NameString
    email: EmailStr
    phone: t.Annotated[str, StringConstraints(max_length=20, strip_whitespace=True)] = ""


class TicketPurchaseSchema(Schema):
    event_id: UUID
    quantity: int = Field(1, description="Number of seats, between 1 and the maximum per order.")
    customer_info: CustomerInfoSchema | None = Field(None, description="Required when buying without an account.")
    special_requests: t.Annotated[str, StringConstraints(max_length=300, strip_whitespace=True)] | None = None
    payment_method: PaymentMethod = PaymentMethod.CARD


class TicketSchema(ModelSchema):
    """A ticket as seen by its holder, credentials included."""

    event: MinimalEventSchema
    status: TicketStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    customer_name: str
    refund_amount: Decimal

    class Meta:
        model = Ticket
        fields = [
            "id",
            "ticket_number",
            "validation_code",
            "qr_payload",
            "quantity",
            "unit_price",
            "total_price",
            "payment_status",
            "payment_method",
            "payment_reference",
            "status",
            "used_at",
            "expires_at",
            "special_requests",
            "created_at",
        ]

    @staticmethod
    def resolve_customer_name(obj: Ticket) -> str:
        return obj.customer_display_name


class EventTicketSchema(ModelSchema):
    """A ticket as seen by the event's organizer. Never exposes the validation code."""

    status: TicketStatus
    payment_status: PaymentStatus
    customer_name: str
    customer_email: str

    class Meta:
        model = Ticket
        fields = [
            "id",
            "ticket_number",
            "quantity",
            "total_price",
            "payment_status",
            "status",
            "special_requests",
            "used_at",
            "created_at",
        ]

    @staticmethod
    def resolve_customer_name(obj: Ticket) -> str:
        return obj.customer_display_name

    @staticmethod
    def resolve_customer_email(obj: Ticket) -> str:
        return obj.user.email if obj.user is not None else obj.guest_email


class PurchaseResponseSchema(Schema):
    ticket: TicketSchema
    available_tickets: int


class CheckInRequestSchema(Schema):
    """Either the printed credentials or the scanned QR payload."""

    ticket_number: StrippedString | None = None
    validation_code: StrippedString | None = None
    qr_payload: StrippedString | None = None

    @model_validator(mode="after")
    def validate_credentials(self) -> t.Self:
        """Require a QR payload or both printed credentials."""
        if not self.qr_payload and not (self.ticket_number and self.validation_code):
            raise ValueError("Provide qr_payload, or ticket_number and validation_code.")
        return self


class CheckedInTicketSchema(Schema):
    id: UUID
    ticket_number: str
    quantity: int
    used_at: datetime | None


class CheckInResponseSchema(Schema):
    ticket: CheckedInTicketSchema
    event: MinimalEventSchema
    customer: str
