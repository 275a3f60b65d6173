"""This module contains the controllers for the authentication app."""

import typing as t

from ninja_extra import api_controller, route, status
from ninja_jwt.controller import TokenObtainPairController
from ninja_jwt.schema import (
    TokenObtainPairInputSchema,
    TokenObtainPairOutputSchema,
    TokenRefreshInputSchema,
    TokenRefreshOutputSchema,
)

from accounts import schema
from accounts.models import User
from accounts.service import account as account_service
from accounts.service.auth import get_token_pair_for_user
from common.throttling import AuthThrottle, UserRegistrationThrottle


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(TokenObtainPairController):
    @route.post("/token/pair", response=TokenObtainPairOutputSchema, url_name="token_obtain_pair")
    def obtain_token(self, user_token: TokenObtainPairInputSchema) -> TokenObtainPairOutputSchema:
        """Authenticate with username (the email) and password to obtain JWT access/refresh tokens."""
        user = t.cast(User, user_token._user)
        return get_token_pair_for_user(user)

    @route.post("/token/refresh", response=TokenRefreshOutputSchema, url_name="token_refresh")
    def refresh_token(self, refresh_token: TokenRefreshInputSchema) -> TokenRefreshOutputSchema:
        """Exchange a refresh token for a new access token."""
        return t.cast(TokenRefreshOutputSchema, refresh_token.to_response_schema())  # type: ignore[no-untyped-call]

    @route.post(
        "/register",
        response={201: schema.UserSchema},
        url_name="register",
        throttle=UserRegistrationThrottle(),
    )
    def register(self, payload: schema.RegisterUserSchema) -> tuple[int, User]:
        """Create a new account with email and password.

        Pick `organizer` as role to be able to create events. Returns 400 if the email is taken.
        """
        return status.HTTP_201_CREATED, account_service.register_user(payload)
