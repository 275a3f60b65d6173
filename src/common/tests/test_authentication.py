import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory
from ninja_jwt.tokens import RefreshToken

from common.authentication import OptionalAuth
from conftest import UserFactory

pytestmark = pytest.mark.django_db


def test_optional_auth_without_header() -> None:
    request = RequestFactory().get("/")

    user = OptionalAuth()(request)

    assert isinstance(user, AnonymousUser)
    assert isinstance(request.user, AnonymousUser)


def test_optional_auth_with_token(user_factory: UserFactory) -> None:
    user = user_factory()
    token = RefreshToken.for_user(user).access_token  # type: ignore[attr-defined]
    request = RequestFactory().get("/", HTTP_AUTHORIZATION=f"Bearer {token}")

    assert OptionalAuth()(request) == user


def test_optional_auth_with_wrong_scheme() -> None:
    request = RequestFactory().get("/", HTTP_AUTHORIZATION="Basic dXNlcjpwYXNz")

    assert OptionalAuth()(request) is None
