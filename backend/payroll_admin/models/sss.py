"""SSS contribution rows and generated R3 reports."""
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

SSS_REPORT_STATUSES = ("generated", "submitted")


class SSSContribution(TenantMixin, TimestampMixin, Base):
    """Precomputed monthly SSS shares for one employee."""

    __tablename__ = "sss_contributions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="CASCADE"), index=True
    )
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)
    month: Mapped[str] = mapped_column(String(7), index=True)
    monthly_compensation: Mapped[float] = mapped_column(Float)
    sss_bracket: Mapped[str] = mapped_column(String)
    employee_contribution: Mapped[float] = mapped_column(Float)
    employer_contribution: Mapped[float] = mapped_column(Float)
    ec_contribution: Mapped[float] = mapped_column(Float)
    total_contribution: Mapped[float] = mapped_column(Float)

    employee = relationship("Employee", lazy="joined")

    __table_args__ = (
        UniqueConstraint(
            "payroll_period_id", "month", "employee_id", name="uq_sss_contributions_period_month_employee"
        ),
    )


class SSSReport(TenantMixin, TimestampMixin, Base):
    """An R3 contribution collection list generated for one month."""

    __tablename__ = "sss_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="CASCADE"), index=True
    )
    month: Mapped[str] = mapped_column(String(7))
    report_type: Mapped[str] = mapped_column(String, default="R3")
    file_name: Mapped[str] = mapped_column(String)
    content: Mapped[str] = mapped_column(Text)
    total_employees: Mapped[int] = mapped_column(Integer, default=0)
    total_compensation: Mapped[float] = mapped_column(Float, default=0.0)
    total_contribution: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String, default="generated")
    due_date: Mapped[date] = mapped_column(Date)
    reference_number: Mapped[str | None] = mapped_column(String, nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    generated_by: Mapped[str] = mapped_column(String, default="")

    period = relationship("PayrollPeriod", lazy="joined")
