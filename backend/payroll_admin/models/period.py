"""Payroll period (pay cycle) model."""
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TenantMixin, TimestampMixin

PERIOD_TYPES = ("weekly", "bi_weekly", "semi_monthly", "monthly")

PERIOD_STATUSES = (
    "draft",
    "importing",
    "calculating",
    "calculated",
    "reviewing",
    "approved",
    "bank_file_generated",
    "paid",
    "closed",
)


class PayrollPeriod(TenantMixin, TimestampMixin, Base):
    """A pay cycle spanning `start_date`..`end_date` and paid on `pay_date`."""

    __tablename__ = "payroll_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    period_type: Mapped[str] = mapped_column(String, default="semi_monthly")
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    cutoff_date: Mapped[date] = mapped_column(Date)
    pay_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String, default="draft", index=True)

    total_employees: Mapped[int] = mapped_column(Integer, default=0)
    total_gross_pay: Mapped[float] = mapped_column(Float, default=0.0)
    total_deductions: Mapped[float] = mapped_column(Float, default=0.0)
    total_net_pay: Mapped[float] = mapped_column(Float, default=0.0)
    total_employer_cost: Mapped[float] = mapped_column(Float, default=0.0)

    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    finalized_by: Mapped[str | None] = mapped_column(String, nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (Index("ix_period_account_start", "account_id", "start_date"),)
