"""Payroll period form payloads."""
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class PeriodPayload(BaseModel):
    """Fields submitted by the create and edit period forms."""

    name: str = Field(min_length=1, max_length=255)
    period_type: Literal["weekly", "bi_weekly", "semi_monthly", "monthly"]
    start_date: date
    end_date: date
    cutoff_date: date
    pay_date: date

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("The period name is required")
        return value

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value: date, info: ValidationInfo) -> date:
        start = info.data.get("start_date")
        if start is not None and value <= start:
            raise ValueError("End date must be after start date")
        return value

    @field_validator("cutoff_date")
    @classmethod
    def cutoff_within_period(cls, value: date, info: ValidationInfo) -> date:
        start, end = info.data.get("start_date"), info.data.get("end_date")
        if start is not None and end is not None and not (start <= value <= end):
            raise ValueError("Cutoff date must be within the payroll period")
        return value

    @field_validator("pay_date")
    @classmethod
    def pay_after_end(cls, value: date, info: ValidationInfo) -> date:
        end = info.data.get("end_date")
        if end is not None and value <= end:
            raise ValueError("Pay date must be after the payroll end date")
        return value


class PeriodReject(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)
