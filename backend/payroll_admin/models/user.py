"""Application user with tenant scoping."""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TenantMixin

APPROVER_ROLES = frozenset({"admin", "payroll_manager"})


class User(TenantMixin, Base):
    """Payroll staff account."""

    __tablename__ = "users"

    __table_args__ = (UniqueConstraint("account_id", "username", name="uq_users_account_username"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String, index=True)
    full_name: Mapped[str] = mapped_column(String, default="")
    role: Mapped[str] = mapped_column(String, default="payroll_officer")
    password_hash: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def is_approver(self) -> bool:
        return self.role in APPROVER_ROLES
