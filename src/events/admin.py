# src/events/admin.py

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from . import models


class UserLinkMixin:
    """Mixin to add a link to the ticket's registered owner."""

    def user_link(self, obj: t.Any) -> str:
        if obj.user is None:
            return "-"
        url = reverse("admin:accounts_user_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.username)

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class TicketInline(TabularInline):  # type: ignore[misc]
    model = models.Ticket
    fields = ["ticket_number", "quantity", "total_price", "status", "payment_status"]
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = [
        "title",
        "organizer",
        "status",
        "is_validated",
        "start_date",
        "total_capacity",
        "available_tickets",
    ]
    list_filter = ["status", "is_validated", "category"]
    search_fields = ["title", "venue_name", "city", "organizer__username"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["id", "available_tickets", "validated_by", "validated_at", "created_at", "updated_at"]
    date_hierarchy = "start_date"
    inlines = [TicketInline]

    def get_readonly_fields(self, request: t.Any, obj: models.Event | None = None) -> list[str]:
        """Capacity is fixed once the event exists; seats only move through purchases and releases."""
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly.append("total_capacity")
        return readonly


@admin.register(models.Ticket)
class TicketAdmin(ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[misc]
    list_display = [
        "ticket_number",
        "event_link",
        "user_link",
        "guest_email",
        "quantity",
        "total_price",
        "status",
        "payment_status",
        "used_at",
    ]
    list_filter = ["status", "payment_status", "payment_method"]
    search_fields = ["ticket_number", "event__title", "user__username", "guest_email"]
    # These only change through the ticketing services, which keep the event's capacity in step.
    readonly_fields = [
        "id",
        "event",
        "user",
        "quantity",
        "unit_price",
        "total_price",
        "status",
        "payment_status",
        "ticket_number",
        "validation_code",
        "qr_payload",
        "used_at",
        "used_by",
        "payment_reference",
        "created_at",
    ]
    date_hierarchy = "created_at"

    def get_queryset(self, request: t.Any) -> t.Any:
        return super().get_queryset(request).select_related("event", "user")

    def has_add_permission(self, request: t.Any) -> bool:
        return False
