"""Employee loans, amortization payments and cancellation."""
from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from ..exceptions import InvalidStateError
from ..filters import apply_search, clean, clean_list, filter_state
from ..models import Employee, EmployeeLoan, LoanPayment
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, iso, percentage
from ..schemas.loans import LoanCancel, LoanCreate, LoanPaymentCreate
from .base import TenantService, employee_summary

logger = logging.getLogger(__name__)


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping to the end of shorter months."""

    index = start.month - 1 + months
    year, month = start.year + index // 12, index % 12 + 1
    return date(year, month, min(start.day, calendar.monthrange(year, month)[1]))


def loan_props(loan: EmployeeLoan) -> Dict[str, Any]:
    paid_amount = max(0.0, loan.total_amount - loan.remaining_balance)
    return {
        "id": loan.id,
        "loan_number": loan.loan_number,
        "employee_id": loan.employee_id,
        "employee": employee_summary(loan.employee),
        "loan_type": loan.loan_type,
        "type_badge": badge("loan_type", loan.loan_type),
        "principal_amount": loan.principal_amount,
        "interest_rate": loan.interest_rate,
        "total_amount": loan.total_amount,
        "monthly_amortization": loan.monthly_amortization,
        "remaining_balance": loan.remaining_balance,
        "formatted_principal_amount": format_currency(loan.principal_amount),
        "formatted_total_amount": format_currency(loan.total_amount),
        "formatted_monthly_amortization": format_currency(loan.monthly_amortization),
        "formatted_remaining_balance": format_currency(loan.remaining_balance),
        "number_of_installments": loan.number_of_installments,
        "installments_paid": loan.installments_paid,
        "loan_date": iso(loan.loan_date),
        "start_date": iso(loan.start_date),
        "maturity_date": iso(loan.maturity_date),
        "status": loan.status,
        "status_badge": badge("loan_status", loan.status),
        "is_active": loan.status == "active",
        "progress_percentage": percentage(paid_amount, loan.total_amount),
        "notes": loan.notes,
    }


def payment_props(payment: LoanPayment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "installment_number": payment.installment_number,
        "payroll_period_id": payment.payroll_period_id,
        "payment_date": iso(payment.payment_date),
        "amount": payment.amount,
        "formatted_amount": format_currency(payment.amount),
        "balance_after": payment.balance_after,
        "formatted_balance_after": format_currency(payment.balance_after),
        "remarks": payment.remarks,
        "recorded_by": payment.recorded_by,
    }


class LoanService(TenantService):
    async def get(self, loan_id: int) -> EmployeeLoan:
        return await self._get(EmployeeLoan, loan_id, "Employee loan")

    async def index_props(
        self,
        loan_type: Optional[List[str]] = None,
        status: Optional[List[str]] = None,
        employee_id: Optional[int] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        statement = (
            select(EmployeeLoan)
            .join(Employee, EmployeeLoan.employee_id == Employee.id)
            .where(EmployeeLoan.account_id == self.account_id)
        )
        if clean_list(loan_type):
            statement = statement.where(EmployeeLoan.loan_type.in_(clean_list(loan_type)))
        if clean_list(status):
            statement = statement.where(EmployeeLoan.status.in_(clean_list(status)))
        if employee_id:
            statement = statement.where(EmployeeLoan.employee_id == employee_id)
        if clean(department):
            statement = statement.where(Employee.department == department)
        statement = apply_search(
            statement, search, Employee.full_name, Employee.code, EmployeeLoan.loan_number
        )
        result = await self.session.execute(
            statement.order_by(EmployeeLoan.loan_date.desc(), EmployeeLoan.id.desc())
        )
        loans = list(result.scalars().all())
        active = [loan for loan in loans if loan.status == "active"]
        outstanding = round(sum(loan.remaining_balance for loan in active), 2)
        amortization = round(sum(loan.monthly_amortization for loan in active), 2)

        departments = await self.session.execute(
            select(Employee.department)
            .where(Employee.account_id == self.account_id, Employee.department != "")
            .distinct()
            .order_by(Employee.department)
        )
        return {
            "loans": [loan_props(loan) for loan in loans],
            "employees": await self.employee_options(),
            "departments": list(departments.scalars().all()),
            "summary": {
                "total_loans": len(loans),
                "active_loans": len(active),
                "total_outstanding": outstanding,
                "formatted_total_outstanding": format_currency(outstanding),
                "monthly_amortization_total": amortization,
                "formatted_monthly_amortization_total": format_currency(amortization),
            },
            "filters": filter_state(
                loan_type=loan_type or [],
                status=status or [],
                employee_id=employee_id,
                department=department,
                search=search,
            ),
        }

    async def show_props(self, loan_id: int) -> Dict[str, Any]:
        loan = await self.get(loan_id)
        return {
            "loan": loan_props(loan),
            "payments": [payment_props(payment) for payment in loan.payments],
        }

    async def _next_loan_number(self) -> str:
        result = await self.session.execute(
            select(func.count(EmployeeLoan.id)).where(EmployeeLoan.account_id == self.account_id)
        )
        return f"LOAN-{int(result.scalar_one()) + 1:05d}"

    async def create(self, payload: LoanCreate) -> EmployeeLoan:
        employee = await self.employee_or_invalid(payload.employee_id)
        rate = payload.interest_rate or 0.0
        total = round(payload.principal_amount * (1 + rate / 100), 2)
        loan = EmployeeLoan(
            account_id=self.account_id,
            loan_number=await self._next_loan_number(),
            total_amount=total,
            remaining_balance=total,
            installments_paid=0,
            maturity_date=add_months(payload.start_date, payload.number_of_installments),
            status="active",
            approved_by=self.user.display_name,
            approved_at=datetime.utcnow(),
            created_by=self.user.display_name,
            **payload.model_dump(),
        )
        self.session.add(loan)
        await self.session.flush()
        self.audit.record(
            "created",
            "EmployeeLoan",
            loan.id,
            loan.loan_number,
            f"Created {payload.loan_type} loan for {employee.full_name}",
            new_values={"principal_amount": payload.principal_amount, "total_amount": total},
        )
        await self.session.commit()
        logger.info("Created loan %s for employee %s", loan.loan_number, employee.id)
        return await self.get(loan.id)

    async def record_payment(self, loan_id: int, payload: LoanPaymentCreate) -> EmployeeLoan:
        loan = await self.get(loan_id)
        if loan.status != "active":
            raise InvalidStateError("Payments can only be recorded against active loans")
        if payload.payroll_period_id is not None:
            await self.period_or_invalid(payload.payroll_period_id)

        previous = loan.remaining_balance
        amount = round(min(payload.amount or loan.monthly_amortization, previous), 2)
        balance = round(previous - amount, 2)
        loan.installments_paid += 1
        loan.remaining_balance = balance
        loan.updated_by = self.user.display_name
        loan.payments.append(
            LoanPayment(
                installment_number=loan.installments_paid,
                payroll_period_id=payload.payroll_period_id,
                payment_date=payload.payment_date,
                amount=amount,
                balance_after=balance,
                remarks=payload.remarks,
                recorded_by=self.user.display_name,
            )
        )
        if balance <= 0:
            loan.remaining_balance = 0.0
            loan.status = "completed"
        self.audit.record(
            "paid",
            "EmployeeLoan",
            loan.id,
            loan.loan_number,
            f"Recorded payment of {format_currency(amount)}",
            old_values={"remaining_balance": previous},
            new_values={"remaining_balance": loan.remaining_balance},
        )
        await self.session.commit()
        logger.info("Recorded payment on loan %s, balance %.2f", loan.loan_number, loan.remaining_balance)
        return await self.get(loan.id)

    async def cancel(self, loan_id: int, payload: LoanCancel) -> EmployeeLoan:
        self.require_approver("cancel loans")
        loan = await self.get(loan_id)
        if loan.status != "active":
            raise InvalidStateError("Only active loans can be cancelled")
        loan.status = "cancelled"
        loan.notes = payload.reason
        loan.updated_by = self.user.display_name
        self.audit.record(
            "cancelled",
            "EmployeeLoan",
            loan.id,
            loan.loan_number,
            payload.reason,
            old_values={"status": "active"},
            new_values={"status": "cancelled"},
        )
        await self.session.commit()
        logger.info("Cancelled loan %s", loan.loan_number)
        return await self.get(loan.id)
