"""Generated bank payroll upload files."""
from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TenantMixin, TimestampMixin

BANK_FILE_STATUSES = ("generated", "validated", "uploaded", "failed")


class BankFile(TenantMixin, TimestampMixin, Base):
    """A payment-instruction file for one bank and one payroll period."""

    __tablename__ = "bank_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    payroll_period_id: Mapped[int] = mapped_column(
        ForeignKey("payroll_periods.id", ondelete="CASCADE"), index=True
    )
    bank_name: Mapped[str] = mapped_column(String)
    file_name: Mapped[str] = mapped_column(String)
    file_format: Mapped[str] = mapped_column(String)
    file_size: Mapped[int] = mapped_column(Integer, default=0)
    file_hash: Mapped[str] = mapped_column(String, default="")
    content: Mapped[bytes] = mapped_column(LargeBinary, default=b"")
    # Rows written into the file, kept for validation without re-parsing
    records: Mapped[list] = mapped_column(JSON, default=list)
    total_employees: Mapped[int] = mapped_column(Integer, default=0)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[str] = mapped_column(String, default="generated", index=True)

    generated_by: Mapped[str] = mapped_column(String, default="")
    generated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    uploaded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    confirmation_method: Mapped[str | None] = mapped_column(String, nullable=True)
    confirmation_number: Mapped[str | None] = mapped_column(String, nullable=True)

    period = relationship("PayrollPeriod", lazy="joined")
