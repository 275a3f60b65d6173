import typing as t
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

from .event import Event


class TicketStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    USED = "used", "Used"
    CANCELLED = "cancelled", "Cancelled"
    EXPIRED = "expired", "Expired"
    REFUNDED = "refunded", "Refunded"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"
    CANCELLED = "cancelled", "Cancelled"


class PaymentMethod(models.TextChoices):
    CARD = "card", "Card"
    BANK_TRANSFER = "bank_transfer", "Bank Transfer"
    MOBILE_MONEY = "mobile_money", "Mobile Money"
    CRYPTO = "crypto", "Crypto"


@dataclass(frozen=True)
class RegisteredOwner:
    user_id: UUID


@dataclass(frozen=True)
class GuestOwner:
    first_name: str
    last_name: str
    email: str
    phone: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


Owner = RegisteredOwner | GuestOwner


class TicketQuerySet(models.QuerySet["Ticket"]):
    """Custom queryset for Ticket model with common prefetch patterns."""

    def with_event(self) -> t.Self:
        """Select the related event and its organizer."""
        return self.select_related("event", "event__organizer")

    def with_user(self) -> t.Self:
        """Select the related user."""
        return self.select_related("user")

    def full(self) -> t.Self:
        return self.with_event().with_user()

    def owned_by(self, user_id: UUID) -> t.Self:
        return self.filter(user_id=user_id)


class TicketManager(models.Manager["Ticket"]):
    """Custom manager for Ticket with convenience methods for related object selection."""

    def get_queryset(self) -> TicketQuerySet:
        """Get base queryset."""
        return TicketQuerySet(self.model, using=self._db)

    def with_event(self) -> TicketQuerySet:
        return self.get_queryset().with_event()

    def with_user(self) -> TicketQuerySet:
        return self.get_queryset().with_user()

    def full(self) -> TicketQuerySet:
        """Returns a queryset with event, organizer and user selected."""
        return self.get_queryset().full()

    def owned_by(self, user_id: UUID) -> TicketQuerySet:
        return self.get_queryset().owned_by(user_id)


class Ticket(TimeStampedModel):
    """A purchase of one or more seats for an event.

    The ticket belongs either to a registered user or to a guest, never both. Always go through
    `Ticket.owner` instead of touching `user` or the `guest_*` columns directly.
    """

    ticket_number = models.CharField(max_length=40, unique=True, editable=False)
    validation_code = models.CharField(max_length=6, editable=False)
    qr_payload = models.CharField(max_length=64, editable=False)

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tickets")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name="tickets"
    )
    guest_first_name = models.CharField(max_length=50, blank=True)
    guest_last_name = models.CharField(max_length=50, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=20, blank=True)

    quantity = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(settings.TICKETING_MAX_TICKETS_PER_ORDER)]
    )
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    total_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])

    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CARD)
    payment_reference = models.CharField(max_length=40, blank=True)

    status = models.CharField(max_length=20, choices=TicketStatus.choices, default=TicketStatus.ACTIVE, db_index=True)
    used_at = models.DateTimeField(null=True, blank=True, editable=False)
    used_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checked_in_tickets",
        editable=False,
    )
    expires_at = models.DateTimeField(db_index=True)

    special_requests = models.CharField(max_length=300, blank=True)
    notes = models.CharField(max_length=500, blank=True)

    objects = TicketManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(user__isnull=False, guest_first_name="", guest_last_name="", guest_email="")
                    | (
                        Q(user__isnull=True)
                        & ~Q(guest_first_name="")
                        & ~Q(guest_last_name="")
                        & ~Q(guest_email="")
                    )
                ),
                name="ticket_exactly_one_owner",
            ),
            models.CheckConstraint(condition=Q(quantity__gte=1), name="ticket_quantity_positive"),
        ]
        indexes = [
            models.Index(fields=["ticket_number", "validation_code"], name="idx_ticket_number_code"),
            models.Index(fields=["event", "status"], name="idx_ticket_event_status"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.ticket_number

    def clean(self) -> None:
        super().clean()
        if self.unit_price is not None and self.quantity is not None and self.total_price is not None:
            if self.total_price != self.unit_price * self.quantity:
                raise DjangoValidationError({"total_price": "Total price must equal unit price times quantity."})

    @property
    def owner(self) -> Owner:
        if self.user_id is not None:
            return RegisteredOwner(user_id=self.user_id)
        return GuestOwner(
            first_name=self.guest_first_name,
            last_name=self.guest_last_name,
            email=self.guest_email,
            phone=self.guest_phone,
        )

    @owner.setter
    def owner(self, value: Owner) -> None:
        if isinstance(value, RegisteredOwner):
            self.user_id = value.user_id
            self.guest_first_name = self.guest_last_name = self.guest_email = self.guest_phone = ""
        else:
            self.user = None
            self.guest_first_name = value.first_name
            self.guest_last_name = value.last_name
            self.guest_email = value.email
            self.guest_phone = value.phone

    def is_owned_by(self, user_id: UUID | None) -> bool:
        return user_id is not None and self.owner == RegisteredOwner(user_id=user_id)

    @property
    def customer_display_name(self) -> str:
        """The name to greet the holder with at the door."""
        owner = self.owner
        if isinstance(owner, GuestOwner):
            return owner.display_name
        if self.user is not None:
            return t.cast(str, self.user.display_name)
        return ""

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @property
    def refund_amount(self) -> Decimal:
        """What was given back to the customer; zero unless the payment was refunded."""
        if self.payment_status == PaymentStatus.REFUNDED:
            return self.total_price
        return Decimal("0")
