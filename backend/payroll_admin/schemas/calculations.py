"""Calculation run payloads and ingested engine results."""
from typing import List, Literal

from pydantic import BaseModel, Field


class CalculationStart(BaseModel):
    payroll_period_id: int
    calculation_type: Literal["regular", "adjustment", "final", "re-calculation"] = "regular"


class EmployeeCalculationRow(BaseModel):
    """Precomputed pay figures for one employee, as produced by the engine."""

    employee_id: int
    basic_salary: float = Field(ge=0)
    overtime_pay: float = Field(default=0.0, ge=0)
    allowances: float = Field(default=0.0, ge=0)
    gross_pay: float = Field(ge=0)
    sss_contribution: float = Field(default=0.0, ge=0)
    philhealth_contribution: float = Field(default=0.0, ge=0)
    pagibig_contribution: float = Field(default=0.0, ge=0)
    withholding_tax: float = Field(default=0.0, ge=0)
    total_deductions: float = Field(ge=0)
    net_pay: float = Field(ge=0)
    employer_contribution: float = Field(default=0.0, ge=0)


class CalculationResults(BaseModel):
    results: List[EmployeeCalculationRow] = Field(min_length=1)
