import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import User


class UserAwareController(ControllerBase):
    def maybe_user(self) -> User | AnonymousUser:
        """Get the user for this request."""
        return t.cast(User | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> User:
        """Get the user for this request."""
        return t.cast(User, self.context.request.user)  # type: ignore[union-attr]

    def maybe_actor(self) -> User | None:
        """The authenticated user, or None for anonymous requests."""
        user = self.maybe_user()
        return None if user.is_anonymous else t.cast(User, user)
