"""Employee payloads."""
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class EmployeeBase(BaseModel):
    """Shared properties for employee operations."""

    code: str
    full_name: str
    email: EmailStr | None = None
    contact_number: str | None = None
    position: str | None = None
    department: str | None = None
    join_date: date | None = None
    exit_date: date | None = None
    basic_salary: float | None = None
    employment_status: Literal["active", "on_leave", "separated"] = "active"
    sss_number: str | None = None
    bank_name: str | None = None
    bank_account_number: str | None = None


class EmployeeCreate(EmployeeBase):
    """Employee payload for creation."""

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        return value or None


class EmployeeRead(EmployeeBase):
    """Employee representation returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        return value or None
