"""Tests for UserAwareController."""

from unittest.mock import Mock

import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory

from common.controllers import UserAwareController
from conftest import UserFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def controller() -> UserAwareController:
    """Create a UserAwareController instance."""
    return UserAwareController()


def test_maybe_actor_for_authenticated_user(controller: UserAwareController, user_factory: UserFactory) -> None:
    user = user_factory()
    request = RequestFactory().get("/")
    request.user = user
    controller.context = Mock(request=request)

    assert controller.maybe_actor() == user
    assert controller.user() == user


def test_maybe_actor_for_anonymous_user(controller: UserAwareController) -> None:
    request = RequestFactory().get("/")
    request.user = AnonymousUser()
    controller.context = Mock(request=request)

    assert controller.maybe_actor() is None
    assert controller.maybe_user().is_anonymous
