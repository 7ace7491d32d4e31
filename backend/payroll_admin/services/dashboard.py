"""Payroll dashboard: current period, headcount, trends and alerts."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from ..models import (
    AuditLog,
    BankFile,
    CashAdvance,
    Employee,
    PayrollAdjustment,
    PayrollCalculation,
    PayrollPeriod,
    SSSReport,
)
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, iso, percentage_change, relative_time
from .base import TenantService
from .periods import period_props

UNAPPROVED_STATUSES = ("draft", "importing", "calculating", "calculated", "reviewing")
CALCULATED_STATUSES = ("calculated", "reviewing", "approved", "bank_file_generated", "paid", "closed")
BANK_FILE_WARNING_DAYS = 2

ACTIVITY_ICONS = {
    "created": "plus-circle",
    "updated": "edit",
    "deleted": "trash",
    "calculated": "calculator",
    "adjusted": "sliders",
    "approved": "check-circle",
    "rejected": "x-circle",
    "finalized": "lock",
    "generated": "file-text",
    "uploaded": "upload",
    "submitted": "send",
    "deducted": "minus-circle",
    "paid": "credit-card",
    "cancelled": "slash",
}

QUICK_ACTIONS = [
    {
        "category": "Payroll Processing",
        "actions": [
            {"label": "New Payroll Period", "route": "/payroll/periods", "icon": "calendar"},
            {"label": "Run Calculation", "route": "/payroll/calculations", "icon": "calculator"},
            {"label": "Review Adjustments", "route": "/payroll/adjustments", "icon": "sliders"},
        ],
    },
    {
        "category": "Payments",
        "actions": [
            {"label": "Generate Bank File", "route": "/payroll/bank-files", "icon": "file-text"},
            {"label": "Cash Advances", "route": "/payroll/advances", "icon": "dollar-sign"},
            {"label": "Employee Loans", "route": "/payroll/loans", "icon": "credit-card"},
        ],
    },
    {
        "category": "Government & Reports",
        "actions": [
            {"label": "SSS Contributions", "route": "/payroll/government/sss", "icon": "shield"},
            {"label": "Audit Trail", "route": "/payroll/reports/audit", "icon": "list"},
        ],
    },
]


def _alert(alert_id: str, severity: str, title: str, message: str, link: str) -> Dict[str, Any]:
    return {
        "id": alert_id,
        "severity": severity,
        "severity_badge": badge("alert_severity", severity),
        "title": title,
        "message": message,
        "link": link,
    }


class DashboardService(TenantService):
    async def _count(self, model, *criteria) -> int:
        result = await self.session.execute(
            select(func.count(model.id)).where(model.account_id == self.account_id, *criteria)
        )
        return int(result.scalar_one())

    async def _periods(self, *criteria) -> List[PayrollPeriod]:
        result = await self.session.execute(
            select(PayrollPeriod)
            .where(PayrollPeriod.account_id == self.account_id, *criteria)
            .order_by(PayrollPeriod.start_date.desc())
        )
        return list(result.scalars().all())

    async def props(self, today: Optional[date] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        today = today or date.today()
        now = now or datetime.utcnow()
        open_periods = await self._periods(PayrollPeriod.status != "closed")
        current = open_periods[0] if open_periods else None
        pending_periods = [p for p in open_periods if p.status != "paid"]

        return {
            "summary": {
                "current_period": self._current_period(current, today),
                "total_employees": await self._headcount(current),
                "net_payroll": await self._net_payroll(),
                "pending_actions": await self._pending_actions(),
            },
            "pendingPeriods": [period_props(p) for p in pending_periods],
            "recentActivities": await self._recent_activities(now),
            "criticalAlerts": await self._alerts(today),
            "quickActions": QUICK_ACTIONS,
        }

    @staticmethod
    def _current_period(period: Optional[PayrollPeriod], today: date) -> Optional[Dict[str, Any]]:
        if period is None:
            return None
        props = period_props(period)
        props["days_until_pay"] = (period.pay_date - today).days
        return props

    async def _headcount(self, period: Optional[PayrollPeriod]) -> Dict[str, int]:
        new_hires = 0
        if period is not None:
            new_hires = await self._count(
                Employee,
                Employee.join_date >= period.start_date,
                Employee.join_date <= period.end_date,
            )
        return {
            "active": await self._count(Employee, Employee.employment_status == "active"),
            "on_leave": await self._count(Employee, Employee.employment_status == "on_leave"),
            "separations": await self._count(Employee, Employee.employment_status == "separated"),
            "new_hires_this_period": new_hires,
        }

    async def _net_payroll(self) -> Dict[str, Any]:
        calculated = await self._periods(PayrollPeriod.status.in_(CALCULATED_STATUSES))
        current = calculated[0].total_net_pay if calculated else 0.0
        previous = calculated[1].total_net_pay if len(calculated) > 1 else 0.0
        change, trend = percentage_change(current, previous)
        difference = round(current - previous, 2)
        return {
            "current": current,
            "previous": previous,
            "difference": difference,
            "percentage_change": change,
            "trend": trend,
            "formatted_current": format_currency(current),
            "formatted_previous": format_currency(previous),
            "formatted_difference": format_currency(difference),
        }

    async def _pending_actions(self) -> Dict[str, int]:
        actions = {
            "periods_to_calculate": await self._count(PayrollPeriod, PayrollPeriod.status == "draft"),
            "periods_to_review": await self._count(PayrollPeriod, PayrollPeriod.status == "calculated"),
            "periods_to_approve": await self._count(PayrollPeriod, PayrollPeriod.status == "reviewing"),
            "pending_adjustments": await self._count(
                PayrollAdjustment, PayrollAdjustment.status == "pending"
            ),
            "pending_advances": await self._count(CashAdvance, CashAdvance.approval_status == "pending"),
        }
        actions["total"] = sum(actions.values())
        return actions

    async def _recent_activities(self, now: datetime) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(AuditLog)
            .where(AuditLog.account_id == self.account_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(10)
        )
        activities = []
        for log in result.scalars().all():
            action = badge("audit_action", log.action)
            entity = badge("audit_entity", log.entity_type)
            activities.append(
                {
                    "id": log.id,
                    "icon": ACTIVITY_ICONS.get(log.action, "activity"),
                    "icon_color": action["color"],
                    "title": f"{entity['label']} {action['label'].lower()}",
                    "description": log.description,
                    "user_name": log.user_name,
                    "relative_time": relative_time(log.created_at, now),
                }
            )
        return activities

    async def _alerts(self, today: date) -> List[Dict[str, Any]]:
        alerts: List[Dict[str, Any]] = []

        failed = await self.session.execute(
            select(PayrollCalculation).where(
                PayrollCalculation.account_id == self.account_id,
                PayrollCalculation.status == "failed",
            )
        )
        for calculation in failed.scalars().all():
            if calculation.period is None:
                continue
            alerts.append(
                _alert(
                    f"calculation-{calculation.id}",
                    "critical",
                    f"Calculation failed for {calculation.period.name}",
                    calculation.error_message or "The calculation run failed",
                    f"/payroll/calculations/{calculation.id}",
                )
            )

        files = await self.session.execute(
            select(BankFile).where(
                BankFile.account_id == self.account_id,
                BankFile.status.in_(("generated", "validated")),
            )
        )
        for bank_file in files.scalars().all():
            if bank_file.period is None:
                continue
            days_left = (bank_file.period.pay_date - today).days
            if days_left <= BANK_FILE_WARNING_DAYS:
                alerts.append(
                    _alert(
                        f"bank-file-{bank_file.id}",
                        "warning",
                        f"{bank_file.bank_name} file not uploaded",
                        f"{bank_file.file_name} has not been uploaded and pay date is "
                        f"{iso(bank_file.period.pay_date)}",
                        "/payroll/bank-files",
                    )
                )

        reports = await self.session.execute(
            select(SSSReport).where(
                SSSReport.account_id == self.account_id,
                SSSReport.status != "submitted",
                SSSReport.due_date < today,
            )
        )
        for report in reports.scalars().all():
            alerts.append(
                _alert(
                    f"sss-{report.id}",
                    "critical",
                    f"SSS R3 for {report.month} is overdue",
                    f"The remittance was due on {iso(report.due_date)}",
                    "/payroll/government/sss",
                )
            )

        for period in await self._periods(
            PayrollPeriod.pay_date < today, PayrollPeriod.status.in_(UNAPPROVED_STATUSES)
        ):
            alerts.append(
                _alert(
                    f"period-{period.id}",
                    "warning",
                    f"{period.name} is past its pay date",
                    f"Pay date was {iso(period.pay_date)} but the period is still "
                    f"{period.status.replace('_', ' ')}",
                    f"/payroll/periods/{period.id}",
                )
            )
        return alerts
