import re
import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class UserQueryset(models.QuerySet["User"]):
    """Queryset for User."""

    def organizers(self) -> t.Self:
        """Users allowed to create events."""
        return self.filter(role__in=[User.Role.ORGANIZER, User.Role.ADMIN])


class BoxOfficeUserManager(UserManager["User"]):
    def get_queryset(self) -> UserQueryset:
        """Get queryset for User."""
        return UserQueryset(self.model)


class User(AbstractUser):
    class Role(models.TextChoices):
        USER = "user", "User"
        ORGANIZER = "organizer", "Organizer"
        ADMIN = "admin", "Admin"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER, db_index=True)
    phone_number = models.CharField(max_length=20, blank=True, help_text="Phone number")

    objects = BoxOfficeUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    @property
    def is_admin(self) -> bool:
        """Platform administrators: the admin role or a Django superuser."""
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def is_organizer(self) -> bool:
        return self.role == self.Role.ORGANIZER or self.is_admin

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's full name, or a prettified username as a fallback."""
        return self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
