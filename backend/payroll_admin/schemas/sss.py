"""SSS contribution import and R3 report payloads."""
import re
from datetime import date
from typing import List

from pydantic import BaseModel, Field, field_validator

MONTH_PATTERN = re.compile(r"\d{4}-(0[1-9]|1[0-2])")


def check_month(value: str) -> str:
    if not MONTH_PATTERN.fullmatch(value or ""):
        raise ValueError("The month must match the format Y-m")
    return value


class ContributionRow(BaseModel):
    employee_id: int
    monthly_compensation: float = Field(ge=0)
    sss_bracket: str = Field(min_length=1)
    employee_contribution: float = Field(ge=0)
    employer_contribution: float = Field(ge=0)
    ec_contribution: float = Field(default=0.0, ge=0)


class ContributionImport(BaseModel):
    period_id: int
    month: str
    rows: List[ContributionRow] = Field(min_length=1)

    @field_validator("month")
    @classmethod
    def month_format(cls, value: str) -> str:
        return check_month(value)


class R3Generate(BaseModel):
    month: str

    @field_validator("month")
    @classmethod
    def month_format(cls, value: str) -> str:
        return check_month(value)


class R3Submit(BaseModel):
    reference_number: str | None = Field(default=None, max_length=255)
    payment_date: date | None = None
