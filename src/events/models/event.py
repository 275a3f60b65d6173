import typing as t
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from accounts.models import User
from common.models import TimeStampedModel


class EventCategory(models.TextChoices):
    CONFERENCE = "conference", "Conference"
    WORKSHOP = "workshop", "Workshop"
    SEMINAR = "seminar", "Seminar"
    CONCERT = "concert", "Concert"
    FESTIVAL = "festival", "Festival"
    SPORTS = "sports", "Sports"
    NETWORKING = "networking", "Networking"
    EXHIBITION = "exhibition", "Exhibition"
    PARTY = "party", "Party"
    OTHER = "other", "Other"


class EventQuerySet(models.QuerySet["Event"]):
    def with_organizer(self) -> t.Self:
        """Select the organizer as well."""
        return self.select_related("organizer")

    def published(self) -> t.Self:
        return self.filter(status=Event.EventStatus.PUBLISHED)

    def upcoming(self, now: datetime) -> t.Self:
        """Events that have not started yet."""
        return self.filter(start_date__gt=now)

    def for_user(self, user: User | AnonymousUser) -> t.Self:
        """Get the events the user is allowed to see.

        Admins see everything, organizers additionally see their own drafts and cancelled events,
        everybody else sees published events only.
        """
        if user.is_anonymous:
            return self.published()
        if t.cast(User, user).is_admin:
            return self
        return self.filter(Q(status=Event.EventStatus.PUBLISHED) | Q(organizer=user))


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        """Get base queryset for events."""
        return EventQuerySet(self.model, using=self._db)

    def with_organizer(self) -> EventQuerySet:
        return self.get_queryset().with_organizer()

    def published(self) -> EventQuerySet:
        return self.get_queryset().published()

    def for_user(self, user: User | AnonymousUser) -> EventQuerySet:
        """Get the queryset based on the user."""
        return self.get_queryset().for_user(user)


class Event(TimeStampedModel):
    """An event with a fixed number of seats.

    `available_tickets` is owned by the capacity ledger: it is set to `total_capacity` on creation and
    afterwards only changed by the conditional UPDATE statements in `events.stores.django_store`.
    `save()` never writes it on updates, so a stale in-memory instance cannot overwrite a concurrent sale.
    """

    class EventStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    title = models.CharField(max_length=200, db_index=True)
    description = models.TextField(max_length=2000)
    category = models.CharField(max_length=20, choices=EventCategory.choices, default=EventCategory.OTHER)
    venue_name = models.CharField(max_length=100)
    city = models.CharField(max_length=100, blank=True)
    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    status = models.CharField(
        max_length=20, choices=EventStatus.choices, default=EventStatus.DRAFT, db_index=True
    )
    start_date = models.DateTimeField(db_index=True)
    end_date = models.DateTimeField()
    ticket_price = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0"), validators=[MinValueValidator(Decimal("0"))]
    )
    total_capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    available_tickets = models.PositiveIntegerField(editable=False)

    is_validated = models.BooleanField(default=False)
    validated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="validated_events",
        editable=False,
    )
    validated_at = models.DateTimeField(null=True, blank=True, editable=False)

    objects = EventManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(available_tickets__gte=0) & Q(available_tickets__lte=F("total_capacity")),
                name="event_available_tickets_within_capacity",
            ),
            models.CheckConstraint(condition=Q(total_capacity__gte=1), name="event_total_capacity_positive"),
            models.CheckConstraint(condition=Q(end_date__gt=F("start_date")), name="event_ends_after_start"),
        ]
        indexes = [
            models.Index(fields=["status", "start_date"], name="idx_event_status_start"),
        ]
        ordering = ["start_date"]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """Validate the schedule and the capacity bounds."""
        super().clean()
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise DjangoValidationError({"end_date": "End date must be after start date."})
        if self.available_tickets is not None and self.total_capacity is not None:
            if self.available_tickets > self.total_capacity:
                raise DjangoValidationError({"total_capacity": "Available tickets cannot exceed the total capacity."})
        if not self._state.adding:
            stored_capacity = Event.objects.filter(pk=self.pk).values_list("total_capacity", flat=True).first()
            if stored_capacity is not None and stored_capacity != self.total_capacity:
                raise DjangoValidationError({"total_capacity": "Capacity cannot be changed once the event exists."})

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Seed the capacity counter on creation and keep it out of every later write."""
        if self._state.adding:
            if self.available_tickets is None:
                self.available_tickets = self.total_capacity
        else:
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [
                    field.name
                    for field in self._meta.concrete_fields
                    if not field.primary_key and field.name != "available_tickets"
                ]
            kwargs["update_fields"] = [name for name in update_fields if name != "available_tickets"]
        super().save(*args, **kwargs)

    @property
    def sold_tickets(self) -> int:
        return self.total_capacity - self.available_tickets

    def is_owned_by(self, user: User | AnonymousUser) -> bool:
        return user.is_authenticated and self.organizer_id == user.pk
