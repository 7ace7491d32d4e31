"""Employee loan payloads."""
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoanCreate(BaseModel):
    employee_id: int | None = Field(default=None, validate_default=True)
    loan_type: Literal["sss", "pagibig", "company", "cash_advance"]
    principal_amount: float = Field(gt=0)
    interest_rate: float | None = Field(default=None, ge=0)
    monthly_amortization: float = Field(gt=0)
    number_of_installments: int = Field(gt=0)
    loan_date: date
    start_date: date
    notes: str | None = None

    @field_validator("employee_id")
    @classmethod
    def employee_selected(cls, value: int | None) -> int:
        if not value:
            raise ValueError("Please select an employee")
        return value


class LoanPaymentCreate(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    payment_date: date = Field(default_factory=date.today)
    payroll_period_id: int | None = None
    remarks: str | None = None


class LoanCancel(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)
