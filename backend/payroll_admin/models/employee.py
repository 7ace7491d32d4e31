"""Employee master data referenced by payroll records."""
from datetime import date

from sqlalchemy import Date, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TenantMixin


class Employee(TenantMixin, Base):
    """Subset of employee fields needed by the payroll screens."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String, index=True)
    full_name: Mapped[str] = mapped_column(String, index=True)
    email: Mapped[str] = mapped_column(String, default="")
    contact_number: Mapped[str] = mapped_column(String, default="")
    position: Mapped[str] = mapped_column(String, default="")
    department: Mapped[str] = mapped_column(String, default="")
    join_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    basic_salary: Mapped[float] = mapped_column(Float, default=0.0)
    employment_status: Mapped[str] = mapped_column(String, default="active")
    sss_number: Mapped[str] = mapped_column(String, default="")
    bank_name: Mapped[str] = mapped_column(String, default="")
    bank_account_number: Mapped[str] = mapped_column(String, default="")

    __table_args__ = (
        UniqueConstraint("account_id", "code", name="uq_employees_account_code"),
        Index("ix_emp_account_code", "account_id", "code"),
        Index("ix_emp_account_fullname", "account_id", "full_name"),
    )
