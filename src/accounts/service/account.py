"""Service layer for user accounts."""

import structlog
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError

from accounts import schema
from accounts.models import User

logger = structlog.get_logger(__name__)


def register_user(payload: schema.RegisterUserSchema) -> User:
    """Register a new user.

    Args:
        payload (schema.RegisterUserSchema): The user data.

    Returns:
        User: The newly created user.
    """
    logger.info("user_registration_started", email=payload.email, role=payload.role)
    if User.objects.filter(username=payload.email).exists():
        logger.warning("user_registration_duplicate", email=payload.email)
        raise HttpError(400, str(_("A user with this email already exists.")))
    new_user = User.objects.create_user(
        username=payload.email,
        email=payload.email,
        password=payload.password1,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
        role=payload.role,
    )
    logger.info("user_registration_completed", user_id=str(new_user.id), email=new_user.email)
    return new_user
