from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=1, alias="newPassword")


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    image: str | None = None

    @field_validator("name", "image", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class PreferencesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preferred_tags: list[str] | None = Field(default=None, alias="preferredTags")
    preferred_artists: list[str] | None = Field(default=None, alias="preferredArtists")
    preferred_locations: list[str] | None = Field(default=None, alias="preferredLocations")
    notification_frequency: Literal["daily", "weekly", "monthly", "never"] | None = Field(
        default=None, alias="notificationFrequency"
    )
