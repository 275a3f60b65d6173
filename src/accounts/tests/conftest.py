# src/accounts/tests/conftest.py
import typing as t

import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts import schema
from accounts.models import User


@pytest.fixture
def valid_register_payload() -> schema.RegisterUserSchema:
    """Provides a valid payload for the user registration endpoint."""
    return schema.RegisterUserSchema(
        email="newuser@example.com",
        password1="a-Strong-password-123!",
        password2="a-Strong-password-123!",
        first_name="New",
        last_name="User",
    )


@pytest.fixture
def user(django_user_model: t.Type[User]) -> User:
    """A standard, non-privileged user."""
    return django_user_model.objects.create_user(
        username="testuser@example.com",
        email="testuser@example.com",
        password="strong-password-123!",
        first_name="Test",
        last_name="User",
    )


@pytest.fixture
def auth_client(user: User) -> Client:
    """API client for the standard user."""
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]
