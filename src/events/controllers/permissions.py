from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from accounts.models import User
from events import models


class IsAdmin(BasePermission):
    """Platform administrators only."""

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        user = request.user
        return user.is_authenticated and isinstance(user, User) and user.is_admin


class IsOrganizer(BasePermission):
    """Organizers and administrators."""

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        user = request.user
        return user.is_authenticated and isinstance(user, User) and user.is_organizer


class EventOwnerOrAdmin(BasePermission):
    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Only has_object_permission matters; ninja-extra requires this one too."""
        return True

    def has_object_permission(
        self,
        request: HttpRequest,
        controller: ControllerBase,
        obj: models.Event,
    ) -> bool:
        """The event's organizer or an administrator."""
        user = request.user
        if not user.is_authenticated or not isinstance(user, User):
            return False
        return obj.organizer_id == user.id or user.is_admin
