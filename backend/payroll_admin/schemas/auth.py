"""Token and user payloads."""
from datetime import datetime, timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Token(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class TokenData(BaseModel):
    """Information encoded into JWTs."""

    username: str
    account_id: str
    role: str | None = None


class UserLogin(BaseModel):
    """Credentials supplied during login."""

    username: str
    password: str
    account_id: str


class UserCreate(UserLogin):
    """Payload for user registration."""

    email: EmailStr | None = None
    full_name: str | None = Field(default=None, max_length=255)
    role: Literal["admin", "payroll_manager", "payroll_officer"] = "payroll_officer"


class UserRead(BaseModel):
    """Public representation of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    account_id: str
    full_name: str = ""
    role: str
    email: EmailStr | None = Field(default=None)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        return value or None


def compute_expiry(minutes: int) -> datetime:
    """Return an absolute expiration timestamp for tokens."""

    return datetime.utcnow() + timedelta(minutes=minutes)
