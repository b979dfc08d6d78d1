"""Pydantic models describing auth and user payloads."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from inventory_api.api.schemas.common import READ_CONFIG, REQUEST_CONFIG
from inventory_api.db.models.user import UserRole

PASSWORD_MIN_LENGTH = 6


class RegisterRequest(BaseModel):
    model_config = REQUEST_CONFIG

    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    role: UserRole | None = None


class LoginRequest(BaseModel):
    model_config = REQUEST_CONFIG

    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    model_config = REQUEST_CONFIG

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)


class ProfileUpdate(BaseModel):
    """Only these fields are mutable; unknown keys are dropped."""

    model_config = REQUEST_CONFIG

    first_name: str | None = Field(None, min_length=1, max_length=50)
    last_name: str | None = Field(None, min_length=1, max_length=50)
    profile_image: str | None = Field(None, max_length=500)


class UserRead(BaseModel):
    """User as returned to clients; never carries the password hash."""

    model_config = READ_CONFIG

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    profile_image: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthPayload(BaseModel):
    user: UserRead
    token: str


class TokenPayload(BaseModel):
    token: str
