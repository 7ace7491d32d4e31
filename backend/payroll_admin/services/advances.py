"""Cash advance requests, approval and installment deductions."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ..exceptions import InvalidStateError, PayrollValidationError
from ..filters import apply_search, clean, filter_state
from ..models import AdvanceDeduction, CashAdvance, Employee
from ..models.advance import ADVANCE_TYPES
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, format_timestamp, iso, percentage
from ..schemas.advances import AdvanceApprove, AdvanceCreate, AdvanceReject, DeductionRecord
from .base import TenantService, employee_summary

logger = logging.getLogger(__name__)


def split_installments(amount: float, count: int) -> List[float]:
    """Split ``amount`` into ``count`` cent-rounded parts; the last absorbs the remainder."""

    if count < 1:
        raise ValueError("count must be at least 1")
    share = round(amount / count, 2)
    parts = [share] * (count - 1)
    parts.append(round(amount - share * (count - 1), 2))
    return parts


def advance_props(advance: CashAdvance) -> Dict[str, Any]:
    approved = advance.amount_approved or 0.0
    repaid = max(0.0, approved - advance.remaining_balance)
    return {
        "id": advance.id,
        "employee_id": advance.employee_id,
        "employee": employee_summary(advance.employee),
        "advance_type": advance.advance_type,
        "amount_requested": advance.amount_requested,
        "amount_approved": advance.amount_approved,
        "formatted_amount_requested": format_currency(advance.amount_requested),
        "formatted_amount_approved": (
            format_currency(advance.amount_approved) if advance.amount_approved is not None else None
        ),
        "purpose": advance.purpose,
        "requested_date": iso(advance.requested_date),
        "priority_level": advance.priority_level,
        "approval_status": advance.approval_status,
        "approval_badge": badge("advance_approval", advance.approval_status),
        "approved_by": advance.approved_by,
        "approved_at": advance.approved_at,
        "formatted_approved_at": format_timestamp(advance.approved_at),
        "approval_notes": advance.approval_notes,
        "deduction_status": advance.deduction_status,
        "deduction_badge": badge("advance_deduction", advance.deduction_status),
        "deduction_schedule": advance.deduction_schedule,
        "number_of_installments": advance.number_of_installments,
        "installments_completed": advance.installments_completed,
        "remaining_balance": advance.remaining_balance,
        "formatted_remaining_balance": format_currency(advance.remaining_balance),
        "deduction_progress": percentage(repaid, approved),
        "created_by": advance.created_by,
        "created_at": advance.created_at,
    }


def deduction_props(deduction: AdvanceDeduction) -> Dict[str, Any]:
    period = deduction.period
    return {
        "id": deduction.id,
        "installment_number": deduction.installment_number,
        "payroll_period_id": deduction.payroll_period_id,
        "period_name": period.name if period is not None else None,
        "deduction_amount": deduction.deduction_amount,
        "formatted_deduction_amount": format_currency(deduction.deduction_amount),
        "remaining_balance_after": deduction.remaining_balance_after,
        "formatted_remaining_balance_after": format_currency(deduction.remaining_balance_after),
        "is_deducted": deduction.is_deducted,
        "deducted_at": deduction.deducted_at,
        "formatted_deducted_at": format_timestamp(deduction.deducted_at),
        "status": "Deducted" if deduction.is_deducted else "Pending",
        "status_color": "green" if deduction.is_deducted else "orange",
    }


class AdvanceService(TenantService):
    """Request, approve and recover cash advances."""

    async def get(self, advance_id: int) -> CashAdvance:
        return await self._get(CashAdvance, advance_id, "Cash advance")

    async def index_props(
        self,
        approval_status: Optional[str] = None,
        deduction_status: Optional[str] = None,
        employee_id: Optional[int] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        statement = (
            select(CashAdvance)
            .join(Employee, CashAdvance.employee_id == Employee.id)
            .where(CashAdvance.account_id == self.account_id)
        )
        if clean(approval_status):
            statement = statement.where(CashAdvance.approval_status == approval_status)
        if clean(deduction_status):
            statement = statement.where(CashAdvance.deduction_status == deduction_status)
        if employee_id:
            statement = statement.where(CashAdvance.employee_id == employee_id)
        if clean(department):
            statement = statement.where(Employee.department == department)
        statement = apply_search(
            statement, search, Employee.full_name, Employee.code, CashAdvance.purpose
        )
        result = await self.session.execute(
            statement.order_by(CashAdvance.requested_date.desc(), CashAdvance.id.desc())
        )
        advances = list(result.scalars().all())
        outstanding = round(
            sum(a.remaining_balance for a in advances if a.deduction_status == "active"), 2
        )
        return {
            "advances": [advance_props(a) for a in advances],
            "employees": await self.employee_options(),
            "summary": {
                "total": len(advances),
                "pending_count": sum(1 for a in advances if a.approval_status == "pending"),
                "active_count": sum(1 for a in advances if a.deduction_status == "active"),
                "total_outstanding": outstanding,
                "formatted_total_outstanding": format_currency(outstanding),
            },
            "filters": filter_state(
                approval_status=approval_status,
                deduction_status=deduction_status,
                employee_id=employee_id,
                department=department,
                search=search,
            ),
        }

    async def form_options(self) -> Dict[str, Any]:
        return {"employees": await self.employee_options(), "advance_types": list(ADVANCE_TYPES)}

    async def create(self, payload: AdvanceCreate) -> CashAdvance:
        employee = await self.employee_or_invalid(payload.employee_id)
        advance = CashAdvance(
            account_id=self.account_id,
            approval_status="pending",
            deduction_status="pending",
            remaining_balance=payload.amount_requested,
            installments_completed=0,
            created_by=self.user.display_name,
            updated_by=self.user.display_name,
            **payload.model_dump(),
        )
        self.session.add(advance)
        await self.session.flush()
        self.audit.record(
            "created",
            "CashAdvance",
            advance.id,
            employee.full_name,
            f"Requested {payload.advance_type} of {format_currency(payload.amount_requested)}",
            new_values=payload.model_dump(),
        )
        await self.session.commit()
        logger.info("Cash advance %s requested for employee %s", advance.id, employee.id)
        return await self.get(advance.id)

    async def approve(self, advance_id: int, payload: AdvanceApprove) -> CashAdvance:
        self.require_approver("approve cash advances")
        advance = await self.get(advance_id)
        if advance.approval_status != "pending":
            raise InvalidStateError("Only pending cash advances can be approved")
        if payload.amount_approved > advance.amount_requested:
            raise PayrollValidationError(
                "The approved amount cannot exceed the requested amount", field="amount_approved"
            )

        amount = round(payload.amount_approved, 2)
        installments = 1 if payload.deduction_schedule == "single_period" else payload.number_of_installments
        advance.approval_status = "approved"
        advance.amount_approved = amount
        advance.approved_by = self.user.display_name
        advance.approved_at = datetime.utcnow()
        advance.approval_notes = payload.approval_notes
        advance.deduction_schedule = payload.deduction_schedule
        advance.remaining_balance = amount
        advance.updated_by = self.user.display_name

        if amount == 0:
            advance.number_of_installments = 0
            advance.deduction_status = "completed"
        else:
            advance.number_of_installments = installments
            advance.deduction_status = "active"
            balance = amount
            for number, part in enumerate(split_installments(amount, installments), start=1):
                balance = round(balance - part, 2)
                advance.deductions.append(
                    AdvanceDeduction(
                        installment_number=number,
                        deduction_amount=part,
                        remaining_balance_after=balance,
                        is_deducted=False,
                    )
                )

        self.audit.record(
            "approved",
            "CashAdvance",
            advance.id,
            advance.employee.full_name,
            f"Approved {format_currency(amount)} over {advance.number_of_installments} installment(s)",
            old_values={"approval_status": "pending", "amount_approved": None},
            new_values={"approval_status": "approved", "amount_approved": amount},
        )
        await self.session.commit()
        logger.info("Approved cash advance %s for %.2f", advance.id, amount)
        return await self.get(advance.id)

    async def reject(self, advance_id: int, payload: AdvanceReject) -> CashAdvance:
        self.require_approver("reject cash advances")
        advance = await self.get(advance_id)
        if advance.approval_status != "pending":
            raise InvalidStateError("Only pending cash advances can be rejected")
        advance.approval_status = "rejected"
        advance.deduction_status = "cancelled"
        advance.remaining_balance = 0.0
        advance.approval_notes = payload.approval_notes
        advance.approved_by = self.user.display_name
        advance.approved_at = datetime.utcnow()
        advance.updated_by = self.user.display_name
        self.audit.record(
            "rejected",
            "CashAdvance",
            advance.id,
            advance.employee.full_name,
            payload.approval_notes,
            old_values={"approval_status": "pending"},
            new_values={"approval_status": "rejected"},
        )
        await self.session.commit()
        logger.info("Rejected cash advance %s", advance.id)
        return await self.get(advance.id)

    async def deductions_props(self, advance_id: int) -> Dict[str, Any]:
        advance = await self.get(advance_id)
        deducted = [d for d in advance.deductions if d.is_deducted]
        total_deducted = round(sum(d.deduction_amount for d in deducted), 2)
        return {
            "advance": advance_props(advance),
            "deductions": [deduction_props(d) for d in advance.deductions],
            "total_deducted": total_deducted,
            "formatted_total_deducted": format_currency(total_deducted),
            "percentage_complete": percentage(total_deducted, advance.amount_approved or 0.0),
            "completed_deductions": len(deducted),
            "total_deductions": len(advance.deductions),
        }

    def _require_active(self, advance: CashAdvance) -> None:
        if advance.deduction_status != "active":
            raise InvalidStateError("Only active cash advances accept deductions")

    async def record_deduction(self, advance_id: int, payload: DeductionRecord) -> CashAdvance:
        advance = await self.get(advance_id)
        self._require_active(advance)
        if payload.payroll_period_id is not None:
            await self.period_or_invalid(payload.payroll_period_id)
        pending = [d for d in advance.deductions if not d.is_deducted]
        if not pending:
            raise InvalidStateError("There are no pending installments left")

        installment = pending[0]
        previous_balance = advance.remaining_balance
        installment.is_deducted = True
        installment.deducted_at = datetime.utcnow()
        installment.payroll_period_id = payload.payroll_period_id
        advance.installments_completed += 1
        advance.remaining_balance = round(max(0.0, previous_balance - installment.deduction_amount), 2)
        if len(pending) == 1:
            advance.deduction_status = "completed"
            advance.remaining_balance = 0.0
        advance.updated_by = self.user.display_name
        self.audit.record(
            "deducted",
            "CashAdvance",
            advance.id,
            advance.employee.full_name,
            f"Deducted installment {installment.installment_number} of "
            f"{format_currency(installment.deduction_amount)}",
            old_values={"remaining_balance": previous_balance},
            new_values={"remaining_balance": advance.remaining_balance},
        )
        await self.session.commit()
        logger.info("Recorded deduction %s for advance %s", installment.installment_number, advance.id)
        return await self.get(advance.id)

    async def early_repayment(self, advance_id: int, payload: DeductionRecord) -> CashAdvance:
        """Settle the whole remaining balance as a single final deduction."""

        advance = await self.get(advance_id)
        self._require_active(advance)
        if payload.payroll_period_id is not None:
            await self.period_or_invalid(payload.payroll_period_id)

        balance = advance.remaining_balance
        for installment in [d for d in advance.deductions if not d.is_deducted]:
            advance.deductions.remove(installment)
        advance.installments_completed += 1
        advance.deductions.append(
            AdvanceDeduction(
                installment_number=advance.installments_completed,
                payroll_period_id=payload.payroll_period_id,
                deduction_amount=balance,
                remaining_balance_after=0.0,
                is_deducted=True,
                deducted_at=datetime.utcnow(),
            )
        )
        advance.number_of_installments = advance.installments_completed
        advance.remaining_balance = 0.0
        advance.deduction_status = "completed"
        advance.updated_by = self.user.display_name
        self.audit.record(
            "deducted",
            "CashAdvance",
            advance.id,
            advance.employee.full_name,
            f"Early repayment of {format_currency(balance)}",
            old_values={"remaining_balance": balance},
            new_values={"remaining_balance": 0.0},
        )
        await self.session.commit()
        logger.info("Advance %s settled early", advance.id)
        return await self.get(advance.id)
