import typing as t

from ninja_extra import ControllerBase, api_controller, route

from accounts.models import User
from accounts.schema import UserSchema
from common.authentication import ContextJWTAuth
from common.throttling import UserDefaultThrottle


@api_controller("/account", tags=["Account"], auth=ContextJWTAuth(), throttle=UserDefaultThrottle())
class AccountController(ControllerBase):
    @route.get("/me", response=UserSchema, url_name="me")
    def me(self) -> User:
        """Retrieve the authenticated user's profile, including their role."""
        return t.cast(User, self.context.request.user)  # type: ignore[union-attr]
