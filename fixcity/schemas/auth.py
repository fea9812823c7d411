"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from fixcity.models.user import EMAIL_PATTERN, NAME_MAX_LENGTH, NAME_MIN_LENGTH, PHONE_PATTERN, User

PASSWORD_MIN_LENGTH = 8


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserPublic(CamelModel):
    """Client-facing user. Only these fields ever leave the server."""

    id: str
    name: str
    email: str
    phone: str
    role: str
    is_email_verified: bool
    last_login: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            is_email_verified=user.is_email_verified,
            last_login=user.last_login_at,
        )


class RegisterRequest(BaseModel):
    name: str
    email: str
    phone: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        v = v.strip()
        if not PHONE_PATTERN.match(v):
            raise ValueError("Please provide a valid phone number")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class AuthData(CamelModel):
    user: UserPublic
    access_token: str


class AccessTokenData(CamelModel):
    access_token: str


class ProfileData(CamelModel):
    user: UserPublic


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    data: AuthData


class RefreshResponse(BaseModel):
    success: bool = True
    data: AccessTokenData


class ProfileResponse(BaseModel):
    success: bool = True
    data: ProfileData


class MessageResponse(CamelModel):
    success: bool = True
    message: str
    reset_token: str | None = None
