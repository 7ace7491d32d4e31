"""Manual corrections applied on top of a payroll calculation."""
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

ADJUSTMENT_TYPES = ("earning", "deduction", "correction", "backpay", "refund")
ADJUSTMENT_STATUSES = ("pending", "approved", "rejected")


class PayrollAdjustment(TenantMixin, TimestampMixin, Base):
    __tablename__ = "payroll_adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="CASCADE"), index=True
    )
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)
    adjustment_type: Mapped[str] = mapped_column(String)
    adjustment_category: Mapped[str] = mapped_column(String(255))
    amount: Mapped[float] = mapped_column(Float)
    reason: Mapped[str] = mapped_column(Text)
    reference_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String, default="pending", index=True)

    requested_by: Mapped[str] = mapped_column(String, default="")
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    period = relationship("PayrollPeriod", lazy="joined")
    employee = relationship("Employee", lazy="joined")

    @property
    def signed_amount(self) -> float:
        """Net effect on pay: deductions subtract, everything else adds."""
        return -self.amount if self.adjustment_type == "deduction" else self.amount
