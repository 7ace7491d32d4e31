"""Payroll period lifecycle and the period listing/detail views."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import extract, select

from ..exceptions import InvalidStateError
from ..filters import apply_search, clean, filter_state
from ..models import PayrollAdjustment, PayrollCalculation, PayrollPeriod
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, format_date_range, format_timestamp, iso
from ..schemas.periods import PeriodPayload
from .base import TenantService

logger = logging.getLogger(__name__)

PERIOD_TYPE_LABELS = {
    "weekly": "Weekly",
    "bi_weekly": "Bi-Weekly",
    "semi_monthly": "Semi-Monthly",
    "monthly": "Monthly",
}

PROGRESS_BY_STATUS = {
    "draft": 0,
    "importing": 10,
    "calculating": 30,
    "calculated": 50,
    "reviewing": 65,
    "approved": 80,
    "bank_file_generated": 90,
    "paid": 95,
    "closed": 100,
}

ACTIONS_BY_STATUS = {
    "draft": ["edit", "delete", "calculate"],
    "importing": ["view"],
    "calculating": ["view"],
    "calculated": ["review", "adjust", "recalculate"],
    "reviewing": ["approve", "reject", "adjust"],
    "approved": ["generate_bank_file"],
    "bank_file_generated": ["mark_paid"],
    "paid": ["close"],
    "closed": ["view"],
}

# action -> (required status, resulting status)
TRANSITIONS = {
    "review": ("calculated", "reviewing"),
    "approve": ("reviewing", "approved"),
    "reject": ("reviewing", "calculated"),
    "mark_paid": ("bank_file_generated", "paid"),
    "close": ("paid", "closed"),
}

# Statuses after which a period's pay can no longer be adjusted
LOCKED_STATUSES = ("approved", "bank_file_generated", "paid", "closed")


def period_props(period: PayrollPeriod) -> Dict[str, Any]:
    return {
        "id": period.id,
        "name": period.name,
        "period_type": period.period_type,
        "period_type_label": PERIOD_TYPE_LABELS.get(period.period_type, period.period_type),
        "start_date": iso(period.start_date),
        "end_date": iso(period.end_date),
        "cutoff_date": iso(period.cutoff_date),
        "pay_date": iso(period.pay_date),
        "date_range": format_date_range(period.start_date, period.end_date),
        "status": period.status,
        "status_badge": badge("period_status", period.status),
        "total_employees": period.total_employees,
        "total_gross_pay": period.total_gross_pay,
        "total_deductions": period.total_deductions,
        "total_net_pay": period.total_net_pay,
        "total_employer_cost": period.total_employer_cost,
        "formatted_gross_pay": format_currency(period.total_gross_pay),
        "formatted_deductions": format_currency(period.total_deductions),
        "formatted_net_pay": format_currency(period.total_net_pay),
        "formatted_employer_cost": format_currency(period.total_employer_cost),
        "progress_percentage": PROGRESS_BY_STATUS.get(period.status, 0),
        "available_actions": list(ACTIONS_BY_STATUS.get(period.status, [])),
        "processed_at": period.processed_at,
        "approved_by": period.approved_by,
        "approved_at": period.approved_at,
        "finalized_by": period.finalized_by,
        "finalized_at": period.finalized_at,
        "formatted_approved_at": format_timestamp(period.approved_at),
    }


class PeriodService(TenantService):
    """Create, edit and move payroll periods through their lifecycle."""

    async def get(self, period_id: int) -> PayrollPeriod:
        return await self._get(PayrollPeriod, period_id, "Payroll period")

    async def index_props(
        self,
        status: Optional[str] = None,
        period_type: Optional[str] = None,
        search: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Dict[str, Any]:
        statement = select(PayrollPeriod).where(PayrollPeriod.account_id == self.account_id)
        if clean(status):
            statement = statement.where(PayrollPeriod.status == status)
        if clean(period_type):
            statement = statement.where(PayrollPeriod.period_type == period_type)
        if year:
            statement = statement.where(extract("year", PayrollPeriod.start_date) == year)
        statement = apply_search(statement, search, PayrollPeriod.name)
        result = await self.session.execute(statement.order_by(PayrollPeriod.start_date.desc()))
        return {
            "periods": [period_props(period) for period in result.scalars().all()],
            "filters": filter_state(status=status, period_type=period_type, search=search, year=year),
        }

    async def show_props(self, period_id: int) -> Dict[str, Any]:
        from .calculations import calculation_props

        period = await self.get(period_id)
        calculations = await self.session.execute(
            select(PayrollCalculation)
            .where(PayrollCalculation.payroll_period_id == period.id)
            .order_by(PayrollCalculation.calculation_date.desc(), PayrollCalculation.id.desc())
        )
        adjustments = await self.session.execute(
            select(PayrollAdjustment).where(PayrollAdjustment.payroll_period_id == period.id)
        )
        rows = list(adjustments.scalars().all())
        net_impact = round(sum(a.signed_amount for a in rows if a.status == "approved"), 2)
        return {
            "period": period_props(period),
            "calculations": [calculation_props(c) for c in calculations.scalars().all()],
            "adjustments_summary": {
                "total": len(rows),
                "pending": sum(1 for a in rows if a.status == "pending"),
                "approved": sum(1 for a in rows if a.status == "approved"),
                "rejected": sum(1 for a in rows if a.status == "rejected"),
                "net_impact": net_impact,
                "formatted_net_impact": format_currency(net_impact),
            },
        }

    async def create(self, payload: PeriodPayload) -> PayrollPeriod:
        period = PayrollPeriod(account_id=self.account_id, status="draft", **payload.model_dump())
        self.session.add(period)
        await self.session.flush()
        self.audit.record(
            "created",
            "PayrollPeriod",
            period.id,
            period.name,
            f"Created payroll period {period.name}",
            new_values=payload.model_dump(),
        )
        await self.session.commit()
        logger.info("Created payroll period %s for %s", period.id, self.account_id)
        return await self.get(period.id)

    async def update(self, period_id: int, payload: PeriodPayload) -> PayrollPeriod:
        period = await self.get(period_id)
        if period.status != "draft":
            raise InvalidStateError("Only draft payroll periods can be edited")
        changes = payload.model_dump()
        old_values = {key: getattr(period, key) for key in changes}
        for key, value in changes.items():
            setattr(period, key, value)
        self.audit.record(
            "updated",
            "PayrollPeriod",
            period.id,
            period.name,
            f"Updated payroll period {period.name}",
            old_values=old_values,
            new_values=changes,
        )
        await self.session.commit()
        logger.info("Updated payroll period %s", period.id)
        return await self.get(period.id)

    async def delete(self, period_id: int) -> None:
        period = await self.get(period_id)
        if period.status != "draft":
            raise InvalidStateError("Only draft payroll periods can be deleted")
        self.audit.record(
            "deleted", "PayrollPeriod", period.id, period.name, f"Deleted payroll period {period.name}"
        )
        await self.session.delete(period)
        await self.session.commit()
        logger.info("Deleted payroll period %s", period_id)

    async def transition(self, period_id: int, action: str, reason: Optional[str] = None) -> PayrollPeriod:
        """Apply one of the ``TRANSITIONS`` to the period."""

        if action in ("approve", "reject"):
            self.require_approver(f"{action} payroll periods")
        required, target = TRANSITIONS[action]
        period = await self.get(period_id)
        if period.status != required:
            raise InvalidStateError(
                f"Cannot {action.replace('_', ' ')} a period that is {period.status.replace('_', ' ')}"
            )

        previous = period.status
        period.status = target
        now = datetime.utcnow()
        audit_action = {"approve": "approved", "reject": "rejected", "close": "finalized", "mark_paid": "paid"}
        if action == "approve":
            period.approved_by = self.user.display_name
            period.approved_at = now
        elif action == "close":
            period.finalized_by = self.user.display_name
            period.finalized_at = now

        description = f"Moved {period.name} from {previous} to {target}"
        if reason:
            description = f"{description}: {reason}"
        self.audit.record(
            audit_action.get(action, "updated"),
            "PayrollPeriod",
            period.id,
            period.name,
            description,
            old_values={"status": previous},
            new_values={"status": target},
        )
        await self.session.commit()
        logger.info("Payroll period %s moved %s -> %s", period.id, previous, target)
        return await self.get(period.id)
