"""Calculation runs and the per-employee results ingested for them."""
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

CALCULATION_TYPES = ("regular", "adjustment", "final", "re-calculation")
CALCULATION_STATUSES = ("pending", "processing", "completed", "failed", "approved")


class PayrollCalculation(TenantMixin, TimestampMixin, Base):
    """One run of the external calculation engine over a payroll period."""

    __tablename__ = "payroll_calculations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="CASCADE"), index=True
    )
    calculation_type: Mapped[str] = mapped_column(String, default="regular")
    status: Mapped[str] = mapped_column(String, default="pending", index=True)
    calculation_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    total_employees: Mapped[int] = mapped_column(Integer, default=0)
    processed_employees: Mapped[int] = mapped_column(Integer, default=0)
    failed_employees: Mapped[int] = mapped_column(Integer, default=0)
    total_gross_pay: Mapped[float] = mapped_column(Float, default=0.0)
    total_deductions: Mapped[float] = mapped_column(Float, default=0.0)
    total_net_pay: Mapped[float] = mapped_column(Float, default=0.0)
    total_employer_cost: Mapped[float] = mapped_column(Float, default=0.0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    started_by: Mapped[str] = mapped_column(String, default="")
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    period = relationship("PayrollPeriod", lazy="joined")
    employee_calculations = relationship(
        "EmployeeCalculation",
        back_populates="calculation",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class EmployeeCalculation(Base):
    """Precomputed pay figures for one employee within a calculation run."""

    __tablename__ = "employee_calculations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    calculation_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_calculations.id", ondelete="CASCADE"), index=True
    )
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)

    basic_salary: Mapped[float] = mapped_column(Float, default=0.0)
    overtime_pay: Mapped[float] = mapped_column(Float, default=0.0)
    allowances: Mapped[float] = mapped_column(Float, default=0.0)
    gross_pay: Mapped[float] = mapped_column(Float, default=0.0)
    sss_contribution: Mapped[float] = mapped_column(Float, default=0.0)
    philhealth_contribution: Mapped[float] = mapped_column(Float, default=0.0)
    pagibig_contribution: Mapped[float] = mapped_column(Float, default=0.0)
    withholding_tax: Mapped[float] = mapped_column(Float, default=0.0)
    total_deductions: Mapped[float] = mapped_column(Float, default=0.0)
    net_pay: Mapped[float] = mapped_column(Float, default=0.0)
    employer_contribution: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String, default="completed")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    calculation = relationship("PayrollCalculation", back_populates="employee_calculations")
    employee = relationship("Employee", lazy="joined")

    __table_args__ = (
        UniqueConstraint("calculation_id", "employee_id", name="uq_employee_calculations_run_employee"),
    )
