"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import User


@admin.register(User)
class BoxOfficeUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[type-arg,misc]
    list_display = ["username", "email", "first_name", "last_name", "role", "is_active"]
    list_filter = ["role", "is_active", "is_staff", "is_superuser"]
    search_fields = ["username", "email", "first_name", "last_name"]
    fieldsets = (*UserAdmin.fieldsets, ("BoxOffice", {"fields": ("role", "phone_number")}))  # type: ignore[misc]
