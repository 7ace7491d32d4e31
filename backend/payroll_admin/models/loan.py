"""Employee loans and their payment history."""
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

LOAN_TYPES = ("sss", "pagibig", "company", "cash_advance")
LOAN_STATUSES = ("active", "completed", "cancelled", "restructured")


class EmployeeLoan(TenantMixin, TimestampMixin, Base):
    __tablename__ = "employee_loans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), index=True)
    loan_type: Mapped[str] = mapped_column(String)
    loan_number: Mapped[str] = mapped_column(String)
    principal_amount: Mapped[float] = mapped_column(Float)
    interest_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_amount: Mapped[float] = mapped_column(Float)
    monthly_amortization: Mapped[float] = mapped_column(Float)
    number_of_installments: Mapped[int] = mapped_column(Integer)
    installments_paid: Mapped[int] = mapped_column(Integer, default=0)
    remaining_balance: Mapped[float] = mapped_column(Float)
    loan_date: Mapped[date] = mapped_column(Date)
    start_date: Mapped[date] = mapped_column(Date)
    maturity_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String, default="active", index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[str] = mapped_column(String, default="")
    updated_by: Mapped[str | None] = mapped_column(String, nullable=True)

    employee = relationship("Employee", lazy="joined")
    payments = relationship(
        "LoanPayment",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="LoanPayment.installment_number",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("account_id", "loan_number", name="uq_employee_loans_account_number"),
    )


class LoanPayment(Base):
    __tablename__ = "loan_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    loan_id: Mapped[int] = mapped_column(ForeignKey("employee_loans.id", ondelete="CASCADE"), index=True)
    installment_number: Mapped[int] = mapped_column(Integer)
    payroll_period_id: Mapped[int | None] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="SET NULL"), nullable=True
    )
    payment_date: Mapped[date] = mapped_column(Date)
    amount: Mapped[float] = mapped_column(Float)
    balance_after: Mapped[float] = mapped_column(Float)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[str] = mapped_column(String, default="")

    loan = relationship("EmployeeLoan", back_populates="payments")
