"""Payroll adjustment form payloads."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class AdjustmentPayload(BaseModel):
    payroll_period_id: int
    employee_id: int
    adjustment_type: Literal["earning", "deduction", "correction", "backpay", "refund"]
    adjustment_category: str = Field(min_length=1, max_length=255)
    amount: float
    reason: str = Field(min_length=1)
    reference_number: str | None = Field(default=None, max_length=255)

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, value: float) -> float:
        if value < 0.01:
            raise ValueError("Amount must be greater than 0")
        return round(value, 2)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Reason is required")
        return value.strip()


class AdjustmentReject(BaseModel):
    rejection_notes: str = Field(min_length=1, max_length=1000)
