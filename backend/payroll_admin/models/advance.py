"""Cash advances and their repayment schedule."""
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

ADVANCE_TYPES = ("Cash Advance", "Equipment Advance", "Travel Advance", "Medical Advance")
DEDUCTION_SCHEDULES = ("single_period", "installments")
PRIORITY_LEVELS = ("normal", "urgent")


class CashAdvance(TenantMixin, TimestampMixin, Base):
    """An employee-requested salary advance repaid through payroll deductions."""

    __tablename__ = "cash_advances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)
    advance_type: Mapped[str] = mapped_column(String)
    amount_requested: Mapped[float] = mapped_column(Float)
    amount_approved: Mapped[float | None] = mapped_column(Float, nullable=True)
    purpose: Mapped[str] = mapped_column(Text)
    requested_date: Mapped[date] = mapped_column(Date)
    priority_level: Mapped[str] = mapped_column(String, default="normal")

    approval_status: Mapped[str] = mapped_column(String, default="pending", index=True)
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    approval_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    deduction_status: Mapped[str] = mapped_column(String, default="pending", index=True)
    deduction_schedule: Mapped[str | None] = mapped_column(String, nullable=True)
    number_of_installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    installments_completed: Mapped[int] = mapped_column(Integer, default=0)
    remaining_balance: Mapped[float] = mapped_column(Float, default=0.0)

    created_by: Mapped[str] = mapped_column(String, default="")
    updated_by: Mapped[str] = mapped_column(String, default="")

    employee = relationship("Employee", lazy="joined")
    deductions = relationship(
        "AdvanceDeduction",
        back_populates="advance",
        cascade="all, delete-orphan",
        order_by="AdvanceDeduction.installment_number",
        lazy="selectin",
    )


class AdvanceDeduction(Base):
    """One scheduled installment of a cash advance repayment."""

    __tablename__ = "advance_deductions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cash_advance_id: Mapped[int] = mapped_column(
        ForeignKey("cash_advances.id", ondelete="CASCADE"), index=True
    )
    installment_number: Mapped[int] = mapped_column(Integer)
    payroll_period_id: Mapped[int | None] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="SET NULL"), nullable=True
    )
    deduction_amount: Mapped[float] = mapped_column(Float)
    remaining_balance_after: Mapped[float] = mapped_column(Float)
    is_deducted: Mapped[bool] = mapped_column(Boolean, default=False)
    deducted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    advance = relationship("CashAdvance", back_populates="deductions")
    period = relationship("PayrollPeriod", lazy="joined")
