from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator, model_validator
from pydantic_core import PydanticCustomError

from campaign_player.enums import UserRoleEnum
from campaign_player.schemas.validators import (
    REQUIRED_MESSAGE,
    coerce_form_bool,
    require_email,
    require_text,
)

MIN_PASSWORD_LENGTH = 8


class User(BaseModel):
    id: int
    name: str
    email: str
    username: str
    role: UserRoleEnum
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _validate_password(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(REQUIRED_MESSAGE)
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    return value


class _UserFormBase(BaseModel):
    name: str
    username: str
    email: str
    role: UserRoleEnum
    is_active: bool = True

    @field_validator("name", "username", mode="before")
    @classmethod
    def validate_required_text(cls, value: Any) -> str:
        return require_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value: Any) -> str:
        return require_email(value)

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(REQUIRED_MESSAGE)
        return value

    @field_validator("is_active", mode="before")
    @classmethod
    def coerce_is_active(cls, value: Any) -> Any:
        return coerce_form_bool(value)


def _passwords_must_match(password: str | None, confirmation: str | None) -> None:
    if password != confirmation:
        # Reported against the confirmation field, matching the dashboard forms.
        raise PydanticCustomError("password_mismatch", "Passwords do not match.")


class UserCreateForm(_UserFormBase):
    password: str
    password_confirmation: str = ""

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        return _validate_password(value)

    @model_validator(mode="after")
    def validate_confirmation(self) -> "UserCreateForm":
        _passwords_must_match(self.password, self.password_confirmation)
        return self


class UserUpdateForm(_UserFormBase):
    password: str | None = None
    password_confirmation: str | None = None

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return _validate_password(value)

    @field_validator("password_confirmation", mode="before")
    @classmethod
    def blank_confirmation(cls, value: Any) -> Any:
        return None if value == "" else value

    @model_validator(mode="after")
    def validate_confirmation(self) -> "UserUpdateForm":
        if self.password is not None:
            _passwords_must_match(self.password, self.password_confirmation)
        return self

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"password", "password_confirmation"})
        if self.password:
            payload["password"] = self.password
            payload["password_confirmation"] = self.password_confirmation
        return payload


class ProfileUpdateForm(BaseModel):
    """Self-service profile edit; role and active flag are not editable here."""

    name: str
    username: str
    email: str
    password: str | None = None
    password_confirmation: str | None = None

    @field_validator("name", "username", mode="before")
    @classmethod
    def validate_required_text(cls, value: Any) -> str:
        return require_text(value)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value: Any) -> str:
        return require_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return _validate_password(value)

    @field_validator("password_confirmation", mode="before")
    @classmethod
    def blank_confirmation(cls, value: Any) -> Any:
        return None if value == "" else value

    @model_validator(mode="after")
    def validate_confirmation(self) -> "ProfileUpdateForm":
        if self.password is not None:
            _passwords_must_match(self.password, self.password_confirmation)
        return self

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", include={"name", "username", "email"})
        if self.password:
            payload["password"] = self.password
            payload["password_confirmation"] = self.password_confirmation
        return payload


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value: Any) -> str:
        return require_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any) -> str:
        # Not stripped: whitespace is a legal password character.
        if not isinstance(value, str) or not value:
            raise ValueError(REQUIRED_MESSAGE)
        return value


class AuthResponse(BaseModel):
    user: User
    token: str
