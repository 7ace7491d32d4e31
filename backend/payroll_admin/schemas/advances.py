"""Cash advance request, approval and deduction payloads."""
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class AdvanceCreate(BaseModel):
    """Fields captured by the advance request form."""

    employee_id: int | None = Field(default=None, validate_default=True)
    advance_type: Literal["Cash Advance", "Equipment Advance", "Travel Advance", "Medical Advance"]
    amount_requested: float
    purpose: str | None = Field(default=None, validate_default=True)
    requested_date: date = Field(default_factory=date.today)
    priority_level: Literal["normal", "urgent"] = "normal"

    @field_validator("employee_id")
    @classmethod
    def employee_selected(cls, value: int | None) -> int:
        if not value:
            raise ValueError("Please select an employee")
        return value

    @field_validator("amount_requested")
    @classmethod
    def amount_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Amount must be greater than 0")
        return round(value, 2)

    @field_validator("purpose")
    @classmethod
    def purpose_given(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("Purpose is required")
        return value.strip()


class AdvanceApprove(BaseModel):
    amount_approved: float = Field(ge=0)
    deduction_schedule: Literal["single_period", "installments"]
    number_of_installments: int = Field(default=1, ge=1, le=12)
    approval_notes: str | None = None


class AdvanceReject(BaseModel):
    approval_notes: str

    @field_validator("approval_notes")
    @classmethod
    def notes_long_enough(cls, value: str) -> str:
        if len(value.strip()) < 10:
            raise ValueError("Rejection notes must be at least 10 characters")
        return value.strip()


class DeductionRecord(BaseModel):
    payroll_period_id: int | None = None
