"""Calculation runs: starting them, ingesting engine results, approval."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select

from ..exceptions import InvalidStateError, PayrollValidationError
from ..filters import clean, filter_state
from ..models import EmployeeCalculation, PayrollCalculation
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, format_timestamp, percentage
from ..schemas.calculations import CalculationResults, CalculationStart
from ..websocket_manager import broadcast_payroll_event
from .base import TenantService, employee_summary

logger = logging.getLogger(__name__)

STARTABLE_PERIOD_STATUSES = ("draft", "calculated")
RECONCILE_TOLERANCE = 0.01
RECONCILE_ERROR = "Net pay does not reconcile with gross pay less deductions"

MONEY_FIELDS = (
    "basic_salary",
    "overtime_pay",
    "allowances",
    "gross_pay",
    "sss_contribution",
    "philhealth_contribution",
    "pagibig_contribution",
    "withholding_tax",
    "total_deductions",
    "net_pay",
    "employer_contribution",
)


def calculation_props(calculation: PayrollCalculation) -> Dict[str, Any]:
    done = calculation.processed_employees + calculation.failed_employees
    period = calculation.period
    return {
        "id": calculation.id,
        "payroll_period_id": calculation.payroll_period_id,
        "period_name": period.name if period is not None else None,
        "calculation_type": calculation.calculation_type,
        "status": calculation.status,
        "status_badge": badge("calculation_status", calculation.status),
        "calculation_date": calculation.calculation_date,
        "formatted_calculation_date": format_timestamp(calculation.calculation_date),
        "total_employees": calculation.total_employees,
        "processed_employees": calculation.processed_employees,
        "failed_employees": calculation.failed_employees,
        "progress_percentage": percentage(done, calculation.total_employees),
        "total_gross_pay": calculation.total_gross_pay,
        "total_deductions": calculation.total_deductions,
        "total_net_pay": calculation.total_net_pay,
        "total_employer_cost": calculation.total_employer_cost,
        "formatted_gross_pay": format_currency(calculation.total_gross_pay),
        "formatted_deductions": format_currency(calculation.total_deductions),
        "formatted_net_pay": format_currency(calculation.total_net_pay),
        "formatted_employer_cost": format_currency(calculation.total_employer_cost),
        "error_message": calculation.error_message,
        "started_by": calculation.started_by,
        "approved_by": calculation.approved_by,
        "approved_at": calculation.approved_at,
    }


def employee_calculation_props(row: EmployeeCalculation) -> Dict[str, Any]:
    props: Dict[str, Any] = {
        "id": row.id,
        "employee_id": row.employee_id,
        "employee": employee_summary(row.employee),
        "status": row.status,
        "status_badge": badge("calculation_status", row.status),
        "error_message": row.error_message,
    }
    for field in MONEY_FIELDS:
        props[field] = getattr(row, field)
        props[f"formatted_{field}"] = format_currency(getattr(row, field))
    return props


def reconciles(row: Any) -> bool:
    return abs(row.gross_pay - row.total_deductions - row.net_pay) <= RECONCILE_TOLERANCE + 1e-9


class CalculationService(TenantService):
    """Track calculation runs whose figures come from the external engine."""

    async def get(self, calculation_id: int) -> PayrollCalculation:
        return await self._get(PayrollCalculation, calculation_id, "Payroll calculation")

    async def index_props(
        self,
        period_id: Optional[int] = None,
        status: Optional[str] = None,
        calculation_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        statement = select(PayrollCalculation).where(PayrollCalculation.account_id == self.account_id)
        if period_id:
            statement = statement.where(PayrollCalculation.payroll_period_id == period_id)
        if clean(status):
            statement = statement.where(PayrollCalculation.status == status)
        if clean(calculation_type):
            statement = statement.where(PayrollCalculation.calculation_type == calculation_type)
        result = await self.session.execute(
            statement.order_by(PayrollCalculation.calculation_date.desc(), PayrollCalculation.id.desc())
        )
        return {
            "calculations": [calculation_props(c) for c in result.scalars().all()],
            "periods": await self.period_options(),
            "filters": filter_state(
                period_id=period_id, status=status, calculation_type=calculation_type
            ),
        }

    async def show_props(self, calculation_id: int) -> Dict[str, Any]:
        calculation = await self.get(calculation_id)
        rows = sorted(
            calculation.employee_calculations,
            key=lambda row: row.employee.full_name if row.employee else "",
        )
        summary = {field: round(sum(getattr(r, field) for r in rows), 2) for field in MONEY_FIELDS}
        summary.update({f"formatted_{field}": format_currency(value) for field, value in list(summary.items())})
        summary["employee_count"] = len(rows)
        return {
            "calculation": calculation_props(calculation),
            "employeeCalculations": [employee_calculation_props(row) for row in rows],
            "summary": summary,
        }

    async def start(self, payload: CalculationStart) -> PayrollCalculation:
        period = await self.period_or_invalid(payload.payroll_period_id)
        if period.status not in STARTABLE_PERIOD_STATUSES:
            raise InvalidStateError(
                f"Calculations cannot be started while the period is {period.status.replace('_', ' ')}"
            )
        total = await self.active_employee_count()
        if total == 0:
            raise PayrollValidationError(
                "There are no active employees to calculate", field="payroll_period_id"
            )

        calculation = PayrollCalculation(
            account_id=self.account_id,
            payroll_period_id=period.id,
            calculation_type=payload.calculation_type,
            status="processing",
            calculation_date=datetime.utcnow(),
            total_employees=total,
            started_by=self.user.display_name,
        )
        self.session.add(calculation)
        previous = period.status
        period.status = "calculating"
        period.total_employees = total
        await self.session.flush()
        self.audit.record(
            "calculated",
            "PayrollCalculation",
            calculation.id,
            period.name,
            f"Started {payload.calculation_type} calculation for {total} employees",
            old_values={"status": previous},
            new_values={"status": "calculating", "total_employees": total},
        )
        await self.session.commit()
        logger.info("Started calculation %s for period %s", calculation.id, period.id)
        await broadcast_payroll_event(
            self.account_id,
            "payroll.calculation.started",
            {"calculation_id": calculation.id, "period_id": period.id, "total_employees": total},
        )
        return await self.get(calculation.id)

    async def ingest_results(self, calculation_id: int, payload: CalculationResults) -> PayrollCalculation:
        """Store engine results and complete the run once every employee is in."""

        calculation = await self.get(calculation_id)
        if calculation.status != "processing":
            raise InvalidStateError("Results can only be added to a calculation that is processing")

        existing = {row.employee_id: row for row in calculation.employee_calculations}
        for item in payload.results:
            await self.employee_or_invalid(item.employee_id)
            row = existing.get(item.employee_id)
            if row is None:
                row = EmployeeCalculation(employee_id=item.employee_id)
                calculation.employee_calculations.append(row)
                existing[item.employee_id] = row
            for field in MONEY_FIELDS:
                setattr(row, field, round(getattr(item, field), 2))
            if reconciles(item):
                row.status, row.error_message = "completed", None
            else:
                row.status, row.error_message = "failed", RECONCILE_ERROR

        self._recount(calculation, existing.values())
        finished = calculation.processed_employees + calculation.failed_employees >= calculation.total_employees
        if finished:
            self._complete(calculation)
        await self.session.commit()

        await broadcast_payroll_event(
            self.account_id,
            "payroll.calculation.progress",
            {
                "calculation_id": calculation.id,
                "processed_employees": calculation.processed_employees,
                "failed_employees": calculation.failed_employees,
                "total_employees": calculation.total_employees,
            },
        )
        if finished:
            await broadcast_payroll_event(
                self.account_id,
                "payroll.calculation.completed",
                {"calculation_id": calculation.id, "status": calculation.status},
            )
        return await self.get(calculation.id)

    @staticmethod
    def _recount(calculation: PayrollCalculation, rows) -> None:
        rows = list(rows)
        completed = [row for row in rows if row.status == "completed"]
        calculation.processed_employees = len(completed)
        calculation.failed_employees = len(rows) - len(completed)
        calculation.total_gross_pay = round(sum(r.gross_pay for r in completed), 2)
        calculation.total_deductions = round(sum(r.total_deductions for r in completed), 2)
        calculation.total_net_pay = round(sum(r.net_pay for r in completed), 2)
        calculation.total_employer_cost = round(
            sum(r.gross_pay + r.employer_contribution for r in completed), 2
        )

    def _complete(self, calculation: PayrollCalculation) -> None:
        period = calculation.period
        if calculation.failed_employees == 0:
            calculation.status = "completed"
            calculation.error_message = None
            period.status = "calculated"
            period.total_gross_pay = calculation.total_gross_pay
            period.total_deductions = calculation.total_deductions
            period.total_net_pay = calculation.total_net_pay
            period.total_employer_cost = calculation.total_employer_cost
            period.processed_at = datetime.utcnow()
            description = f"Calculated net pay of {format_currency(calculation.total_net_pay)}"
        else:
            calculation.status = "failed"
            calculation.error_message = f"{calculation.failed_employees} employee(s) failed calculation"
            period.status = "draft"
            description = calculation.error_message
        self.audit.record(
            "calculated",
            "PayrollCalculation",
            calculation.id,
            period.name,
            description,
            new_values={
                "status": calculation.status,
                "processed_employees": calculation.processed_employees,
                "failed_employees": calculation.failed_employees,
                "total_net_pay": calculation.total_net_pay,
            },
        )
        logger.info("Calculation %s finished as %s", calculation.id, calculation.status)

    async def recalculate(self, calculation_id: int) -> PayrollCalculation:
        calculation = await self.get(calculation_id)
        if calculation.status not in ("failed", "completed"):
            raise InvalidStateError("Only failed or completed calculations can be recalculated")
        if calculation.period.status not in STARTABLE_PERIOD_STATUSES:
            raise InvalidStateError(
                f"Calculations cannot be restarted while the period is "
                f"{calculation.period.status.replace('_', ' ')}"
            )

        previous = calculation.status
        calculation.employee_calculations.clear()
        calculation.status = "processing"
        calculation.calculation_date = datetime.utcnow()
        calculation.total_employees = await self.active_employee_count()
        calculation.error_message = None
        self._recount(calculation, [])
        calculation.period.status = "calculating"
        self.audit.record(
            "calculated",
            "PayrollCalculation",
            calculation.id,
            calculation.period.name,
            "Restarted calculation",
            old_values={"status": previous},
            new_values={"status": "processing"},
        )
        await self.session.commit()
        logger.info("Recalculating calculation %s", calculation.id)
        await broadcast_payroll_event(
            self.account_id,
            "payroll.calculation.started",
            {
                "calculation_id": calculation.id,
                "period_id": calculation.payroll_period_id,
                "total_employees": calculation.total_employees,
            },
        )
        return await self.get(calculation.id)

    async def approve(self, calculation_id: int) -> PayrollCalculation:
        self.require_approver("approve payroll calculations")
        calculation = await self.get(calculation_id)
        if calculation.status != "completed":
            raise InvalidStateError("Only completed calculations can be approved")
        calculation.status = "approved"
        calculation.approved_by = self.user.display_name
        calculation.approved_at = datetime.utcnow()
        self.audit.record(
            "approved",
            "PayrollCalculation",
            calculation.id,
            calculation.period.name,
            "Approved payroll calculation",
            old_values={"status": "completed"},
            new_values={"status": "approved"},
        )
        await self.session.commit()
        logger.info("Approved calculation %s", calculation.id)
        return await self.get(calculation.id)

    async def delete(self, calculation_id: int) -> None:
        calculation = await self.get(calculation_id)
        if calculation.status == "processing":
            raise InvalidStateError("A calculation cannot be deleted while it is processing")
        self.audit.record(
            "deleted",
            "PayrollCalculation",
            calculation.id,
            calculation.period.name,
            "Deleted payroll calculation",
        )
        await self.session.delete(calculation)
        await self.session.commit()
        logger.info("Deleted calculation %s", calculation_id)
