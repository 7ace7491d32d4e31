"""Manual payroll adjustments and their approval workflow."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select

from ..exceptions import InvalidStateError, PayrollValidationError
from ..filters import apply_search, clean, filter_state
from ..models import Employee, PayrollAdjustment
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, format_timestamp
from ..schemas.adjustments import AdjustmentPayload
from .base import TenantService, employee_summary
from .periods import LOCKED_STATUSES

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "payroll_period_id",
    "employee_id",
    "adjustment_type",
    "adjustment_category",
    "amount",
    "reason",
    "reference_number",
)


def adjustment_props(adjustment: PayrollAdjustment) -> Dict[str, Any]:
    period = adjustment.period
    return {
        "id": adjustment.id,
        "payroll_period_id": adjustment.payroll_period_id,
        "period_name": period.name if period is not None else None,
        "employee_id": adjustment.employee_id,
        "employee": employee_summary(adjustment.employee),
        "adjustment_type": adjustment.adjustment_type,
        "type_badge": badge("adjustment_type", adjustment.adjustment_type),
        "adjustment_category": adjustment.adjustment_category,
        "amount": adjustment.amount,
        "signed_amount": adjustment.signed_amount,
        "formatted_amount": format_currency(adjustment.signed_amount),
        "reason": adjustment.reason,
        "reference_number": adjustment.reference_number,
        "status": adjustment.status,
        "status_badge": badge("adjustment_status", adjustment.status),
        "requested_by": adjustment.requested_by,
        "requested_at": adjustment.created_at,
        "formatted_requested_at": format_timestamp(adjustment.created_at),
        "reviewed_by": adjustment.reviewed_by,
        "reviewed_at": adjustment.reviewed_at,
        "formatted_reviewed_at": format_timestamp(adjustment.reviewed_at),
        "rejection_notes": adjustment.rejection_notes,
        "can_edit": adjustment.status == "pending",
    }


class AdjustmentService(TenantService):
    async def get(self, adjustment_id: int) -> PayrollAdjustment:
        return await self._get(PayrollAdjustment, adjustment_id, "Payroll adjustment")

    async def index_props(
        self,
        period_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        adjustment_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        statement = (
            select(PayrollAdjustment)
            .join(Employee, PayrollAdjustment.employee_id == Employee.id)
            .where(PayrollAdjustment.account_id == self.account_id)
        )
        if period_id:
            statement = statement.where(PayrollAdjustment.payroll_period_id == period_id)
        if employee_id:
            statement = statement.where(PayrollAdjustment.employee_id == employee_id)
        if clean(status):
            statement = statement.where(PayrollAdjustment.status == status)
        if clean(adjustment_type):
            statement = statement.where(PayrollAdjustment.adjustment_type == adjustment_type)
        statement = apply_search(
            statement,
            search,
            Employee.full_name,
            Employee.code,
            PayrollAdjustment.adjustment_category,
            PayrollAdjustment.reason,
            PayrollAdjustment.reference_number,
        )
        result = await self.session.execute(
            statement.order_by(PayrollAdjustment.created_at.desc(), PayrollAdjustment.id.desc())
        )
        adjustments = list(result.scalars().all())
        pending_amount = round(sum(a.amount for a in adjustments if a.status == "pending"), 2)
        return {
            "adjustments": [adjustment_props(a) for a in adjustments],
            "periods": await self.period_options(),
            "employees": await self.employee_options(),
            "summary": {
                "total": len(adjustments),
                "pending": sum(1 for a in adjustments if a.status == "pending"),
                "approved": sum(1 for a in adjustments if a.status == "approved"),
                "rejected": sum(1 for a in adjustments if a.status == "rejected"),
                "total_pending_amount": pending_amount,
                "formatted_pending_amount": format_currency(pending_amount),
            },
            "filters": filter_state(
                period_id=period_id,
                employee_id=employee_id,
                status=status,
                adjustment_type=adjustment_type,
                search=search,
            ),
        }

    async def history_props(self, period_id: Optional[int] = None) -> Dict[str, Any]:
        statement = select(PayrollAdjustment).where(
            PayrollAdjustment.account_id == self.account_id,
            PayrollAdjustment.status.in_(("approved", "rejected")),
        )
        if period_id:
            statement = statement.where(PayrollAdjustment.payroll_period_id == period_id)
        result = await self.session.execute(
            statement.order_by(PayrollAdjustment.reviewed_at.desc(), PayrollAdjustment.id.desc())
        )
        return {
            "adjustments": [adjustment_props(a) for a in result.scalars().all()],
            "periods": await self.period_options(),
            "filters": filter_state(period_id=period_id),
        }

    async def _check_open(self, payload: AdjustmentPayload) -> None:
        period = await self.period_or_invalid(payload.payroll_period_id)
        await self.employee_or_invalid(payload.employee_id)
        if period.status in LOCKED_STATUSES:
            raise PayrollValidationError(
                "Adjustments are closed for this period", field="payroll_period_id"
            )

    async def create(self, payload: AdjustmentPayload) -> PayrollAdjustment:
        await self._check_open(payload)
        adjustment = PayrollAdjustment(
            account_id=self.account_id,
            status="pending",
            requested_by=self.user.display_name,
            **payload.model_dump(),
        )
        self.session.add(adjustment)
        await self.session.flush()
        self.audit.record(
            "adjusted",
            "PayrollAdjustment",
            adjustment.id,
            adjustment.adjustment_category,
            f"Requested {payload.adjustment_type} adjustment of {format_currency(payload.amount)}",
            new_values=payload.model_dump(),
        )
        await self.session.commit()
        logger.info("Created adjustment %s for employee %s", adjustment.id, payload.employee_id)
        return await self.get(adjustment.id)

    async def update(self, adjustment_id: int, payload: AdjustmentPayload) -> PayrollAdjustment:
        adjustment = await self.get(adjustment_id)
        if adjustment.status != "pending":
            raise InvalidStateError("Only pending adjustments can be edited")
        await self._check_open(payload)
        changes = payload.model_dump()
        old_values = {field: getattr(adjustment, field) for field in EDITABLE_FIELDS}
        for field in EDITABLE_FIELDS:
            setattr(adjustment, field, changes[field])
        self.audit.record(
            "updated",
            "PayrollAdjustment",
            adjustment.id,
            adjustment.adjustment_category,
            "Updated payroll adjustment",
            old_values=old_values,
            new_values=changes,
        )
        await self.session.commit()
        logger.info("Updated adjustment %s", adjustment.id)
        return await self.get(adjustment.id)

    async def delete(self, adjustment_id: int) -> None:
        adjustment = await self.get(adjustment_id)
        if adjustment.status != "pending":
            raise InvalidStateError("Only pending adjustments can be deleted")
        self.audit.record(
            "deleted",
            "PayrollAdjustment",
            adjustment.id,
            adjustment.adjustment_category,
            "Deleted payroll adjustment",
        )
        await self.session.delete(adjustment)
        await self.session.commit()
        logger.info("Deleted adjustment %s", adjustment_id)

    async def review(
        self, adjustment_id: int, approve: bool, rejection_notes: Optional[str] = None
    ) -> PayrollAdjustment:
        self.require_approver("review payroll adjustments")
        adjustment = await self.get(adjustment_id)
        if adjustment.status != "pending":
            raise InvalidStateError("This adjustment has already been reviewed")
        adjustment.status = "approved" if approve else "rejected"
        adjustment.reviewed_by = self.user.display_name
        adjustment.reviewed_at = datetime.utcnow()
        adjustment.rejection_notes = None if approve else rejection_notes
        self.audit.record(
            adjustment.status,
            "PayrollAdjustment",
            adjustment.id,
            adjustment.adjustment_category,
            f"{adjustment.status.title()} {adjustment.adjustment_type} adjustment of "
            f"{format_currency(adjustment.amount)}",
            old_values={"status": "pending"},
            new_values={"status": adjustment.status},
        )
        await self.session.commit()
        logger.info("Adjustment %s %s", adjustment.id, adjustment.status)
        return await self.get(adjustment.id)
