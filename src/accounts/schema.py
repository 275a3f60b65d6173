"""Schema for accounts module."""

import typing as t

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, StringConstraints, model_validator

from accounts.password_validation import validate_password

from .models import User

NameString = t.Annotated[str, StringConstraints(min_length=2, max_length=50, strip_whitespace=True)]


class UserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = User
        fields = ["email", "first_name", "last_name", "role", "phone_number", "is_active"]


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name"]


class PasswordMixin(Schema):
    password1: str = Field(..., description="Password", min_length=8, max_length=150)
    password2: str = Field(..., description="Password confirmation", min_length=8, max_length=150)

    @model_validator(mode="after")
    def password_match(self) -> t.Self:
        """Validate that the passwords match."""
        if self.password1 != self.password2:
            raise ValueError("Passwords do not match")
        return self


class RegisterUserSchema(PasswordMixin):
    email: EmailStr
    first_name: NameString
    last_name: NameString
    phone_number: t.Annotated[str, StringConstraints(max_length=20, strip_whitespace=True)] = ""
    role: t.Literal["user", "organizer"] = Field(
        "user", description="Organizers may create events. Admins are appointed, never self-registered."
    )

    @model_validator(mode="after")
    def validate_password(self) -> t.Self:
        """Validate the password."""
        tmp_user = User(email=self.email, username=self.email, first_name=self.first_name, last_name=self.last_name)
        validate_password(self.password1, user=tmp_user)
        return self
