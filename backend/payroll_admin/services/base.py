"""Shared plumbing for tenant-scoped payroll services."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NotFoundError, PayrollValidationError, PermissionDeniedError
from ..models import Employee, PayrollPeriod, User
from .audit import AuditTrail

ModelT = TypeVar("ModelT")


class TenantService:
    """Base class binding a session, the acting user and an audit trail."""

    def __init__(self, session: AsyncSession, user: User, ip_address: Optional[str] = None):
        self.session = session
        self.user = user
        self.account_id = user.account_id
        self.audit = AuditTrail(session, user, ip_address)

    async def _get(self, model: Type[ModelT], identifier: int, resource: str) -> ModelT:
        result = await self.session.execute(
            select(model)
            .where(model.id == identifier, model.account_id == self.account_id)
            .execution_options(populate_existing=True)
        )
        instance = result.scalar_one_or_none()
        if instance is None:
            raise NotFoundError(resource, identifier)
        return instance

    def require_approver(self, action: str = "approve this record") -> None:
        if not self.user.is_approver:
            raise PermissionDeniedError(f"You are not allowed to {action}")

    async def employee_or_invalid(self, employee_id: int, field: str = "employee_id") -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None or employee.account_id != self.account_id:
            raise PayrollValidationError("The selected employee is invalid", field=field)
        return employee

    async def period_or_invalid(self, period_id: int, field: str = "payroll_period_id") -> PayrollPeriod:
        period = await self.session.get(PayrollPeriod, period_id)
        if period is None or period.account_id != self.account_id:
            raise PayrollValidationError("The selected payroll period is invalid", field=field)
        return period

    async def active_employee_count(self) -> int:
        result = await self.session.execute(
            select(func.count(Employee.id)).where(
                Employee.account_id == self.account_id,
                Employee.employment_status == "active",
            )
        )
        return int(result.scalar_one())

    async def employee_options(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.account_id == self.account_id, Employee.employment_status != "separated")
            .order_by(Employee.full_name)
        )
        return [
            {
                "id": employee.id,
                "name": employee.full_name,
                "employee_number": employee.code,
                "department": employee.department,
            }
            for employee in result.scalars().all()
        ]

    async def period_options(self, statuses: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        statement = select(PayrollPeriod).where(PayrollPeriod.account_id == self.account_id)
        if statuses is not None:
            statement = statement.where(PayrollPeriod.status.in_(list(statuses)))
        result = await self.session.execute(statement.order_by(PayrollPeriod.start_date.desc()))
        return [
            {"id": period.id, "name": period.name, "status": period.status}
            for period in result.scalars().all()
        ]


def employee_summary(employee: Optional[Employee]) -> Dict[str, Any]:
    if employee is None:
        return {"id": None, "name": "Unknown", "employee_number": "", "department": ""}
    return {
        "id": employee.id,
        "name": employee.full_name,
        "employee_number": employee.code,
        "department": employee.department,
        "position": employee.position,
    }
