"""SSS contribution rows, R3 report generation and remittance tracking."""
from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ..config import get_settings
from ..exceptions import InvalidStateError, PayrollValidationError
from ..filters import apply_search, clean, filter_state
from ..models import Employee, PayrollPeriod, SSSContribution, SSSReport
from ..presenters.badges import badge
from ..presenters.formatting import (
    format_compact_currency,
    format_currency,
    format_timestamp,
    iso,
)
from ..schemas.sss import ContributionImport, R3Submit
from .base import TenantService, employee_summary

logger = logging.getLogger(__name__)

R3_COLUMNS = [
    "SEQUENCE",
    "SSS_NUMBER",
    "EMPLOYEE_NAME",
    "MONTHLY_COMPENSATION",
    "EMPLOYEE_SHARE",
    "EMPLOYER_SHARE",
    "EC_SHARE",
    "TOTAL_CONTRIBUTION",
]
SUMMARY_COLUMNS = [
    "SEQUENCE",
    "SSS_NUMBER",
    "EMPLOYEE_NAME",
    "MONTHLY_COMPENSATION",
    "SSS_BRACKET",
    "EMPLOYEE_CONTRIBUTION",
    "EMPLOYER_CONTRIBUTION",
    "EC_CONTRIBUTION",
    "TOTAL_CONTRIBUTION",
]


def due_date_for(month: str) -> date:
    """Remittances fall due on the 10th of the month after ``month``."""

    year, number = (int(part) for part in month.split("-"))
    if number == 12:
        return date(year + 1, 1, 10)
    return date(year, number + 1, 10)


def month_label(month: str) -> str:
    year, number = (int(part) for part in month.split("-"))
    return f"{date(year, number, 1):%B %Y}"


def _totals(rows: List[SSSContribution]) -> Dict[str, float]:
    return {
        "monthly_compensation": round(sum(r.monthly_compensation for r in rows), 2),
        "employee_share": round(sum(r.employee_contribution for r in rows), 2),
        "employer_share": round(sum(r.employer_contribution for r in rows), 2),
        "ec_share": round(sum(r.ec_contribution for r in rows), 2),
        "total_contribution": round(sum(r.total_contribution for r in rows), 2),
    }


def _csv_rows(header: List[str], rows: List[List[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()


def render_r3(rows: List[SSSContribution], month: str, now: Optional[datetime] = None) -> str:
    settings = get_settings()
    totals = _totals(rows)
    lines = [
        "SSS R3 MONTHLY CONTRIBUTION REPORT",
        f"Report Period: {month}",
        f"Company: {settings.company_name}",
        f"Company TIN: {settings.company_tin}",
        f"Generated: {format_timestamp(now or datetime.utcnow())}",
        "",
    ]
    body = _csv_rows(
        R3_COLUMNS,
        [
            [
                sequence,
                row.employee.sss_number,
                row.employee.full_name,
                f"{row.monthly_compensation:.2f}",
                f"{row.employee_contribution:.2f}",
                f"{row.employer_contribution:.2f}",
                f"{row.ec_contribution:.2f}",
                f"{row.total_contribution:.2f}",
            ]
            for sequence, row in enumerate(rows, start=1)
        ],
    )
    summary = [
        "",
        "SUMMARY",
        f"Total Employees: {len(rows)}",
        f"Total Monthly Compensation: {format_currency(totals['monthly_compensation'])}",
        f"Total Employee Share (EE): {format_currency(totals['employee_share'])}",
        f"Total Employer Share (ER): {format_currency(totals['employer_share'])}",
        f"Total EC Share: {format_currency(totals['ec_share'])}",
        f"Grand Total: {format_currency(totals['total_contribution'])}",
    ]
    return "\n".join(lines) + "\n" + body + "\n".join(summary) + "\n"


def render_contribution_summary(rows: List[SSSContribution], period: PayrollPeriod) -> str:
    settings = get_settings()
    totals = _totals(rows)
    lines = [
        "SSS CONTRIBUTIONS SUMMARY REPORT",
        f"Period: {period.name}",
        f"Company: {settings.company_name}",
        f"Generated: {format_timestamp(datetime.utcnow())}",
        "",
    ]
    body = _csv_rows(
        SUMMARY_COLUMNS,
        [
            [
                sequence,
                row.employee.sss_number,
                row.employee.full_name,
                f"{row.monthly_compensation:.2f}",
                row.sss_bracket,
                f"{row.employee_contribution:.2f}",
                f"{row.employer_contribution:.2f}",
                f"{row.ec_contribution:.2f}",
                f"{row.total_contribution:.2f}",
            ]
            for sequence, row in enumerate(rows, start=1)
        ],
    )
    summary = [
        "",
        "SUMMARY",
        f"Total Employees: {len(rows)}",
        f"Total Monthly Compensation: {format_currency(totals['monthly_compensation'])}",
        f"Total Employee Contribution: {format_currency(totals['employee_share'])}",
        f"Total Employer Contribution: {format_currency(totals['employer_share'])}",
        f"Total EC Contribution: {format_currency(totals['ec_share'])}",
        f"Grand Total Contribution: {format_currency(totals['total_contribution'])}",
    ]
    return "\n".join(lines) + "\n" + body + "\n".join(summary) + "\n"


def contribution_props(row: SSSContribution) -> Dict[str, Any]:
    return {
        "id": row.id,
        "payroll_period_id": row.payroll_period_id,
        "employee_id": row.employee_id,
        "employee": employee_summary(row.employee),
        "sss_number": row.employee.sss_number if row.employee else "",
        "month": row.month,
        "monthly_compensation": row.monthly_compensation,
        "sss_bracket": row.sss_bracket,
        "employee_contribution": row.employee_contribution,
        "employer_contribution": row.employer_contribution,
        "ec_contribution": row.ec_contribution,
        "total_contribution": row.total_contribution,
        "formatted_monthly_compensation": format_currency(row.monthly_compensation),
        "formatted_employee_contribution": format_currency(row.employee_contribution),
        "formatted_employer_contribution": format_currency(row.employer_contribution),
        "formatted_ec_contribution": format_currency(row.ec_contribution),
        "formatted_total_contribution": format_currency(row.total_contribution),
    }


def report_props(report: SSSReport) -> Dict[str, Any]:
    period = report.period
    return {
        "id": report.id,
        "payroll_period_id": report.payroll_period_id,
        "period_name": period.name if period is not None else None,
        "month": report.month,
        "month_label": month_label(report.month),
        "report_type": report.report_type,
        "file_name": report.file_name,
        "total_employees": report.total_employees,
        "total_compensation": report.total_compensation,
        "total_contribution": report.total_contribution,
        "formatted_total_compensation": format_currency(report.total_compensation),
        "formatted_total_contribution": format_currency(report.total_contribution),
        "status": report.status,
        "status_badge": badge("sss_report_status", report.status),
        "due_date": iso(report.due_date),
        "reference_number": report.reference_number,
        "payment_date": iso(report.payment_date),
        "submitted_at": report.submitted_at,
        "formatted_submitted_at": format_timestamp(report.submitted_at),
        "generated_by": report.generated_by,
        "download_url": f"/payroll/government/sss/r3/{report.id}/download",
    }


class SSSService(TenantService):
    async def get_report(self, report_id: int) -> SSSReport:
        return await self._get(SSSReport, report_id, "SSS report")

    async def _contributions(self, period_id: int, month: Optional[str] = None) -> List[SSSContribution]:
        statement = (
            select(SSSContribution)
            .join(Employee, SSSContribution.employee_id == Employee.id)
            .where(
                SSSContribution.account_id == self.account_id,
                SSSContribution.payroll_period_id == period_id,
            )
        )
        if month:
            statement = statement.where(SSSContribution.month == month)
        result = await self.session.execute(statement.order_by(Employee.full_name))
        return list(result.scalars().all())

    async def import_contributions(self, payload: ContributionImport) -> int:
        """Upsert precomputed rows for ``(period, month, employee)``."""

        period = await self.period_or_invalid(payload.period_id, field="period_id")
        existing = {row.employee_id: row for row in await self._contributions(period.id, payload.month)}
        for item in payload.rows:
            await self.employee_or_invalid(item.employee_id)
            row = existing.get(item.employee_id)
            if row is None:
                row = SSSContribution(
                    account_id=self.account_id,
                    payroll_period_id=period.id,
                    employee_id=item.employee_id,
                    month=payload.month,
                )
                self.session.add(row)
                existing[item.employee_id] = row
            row.monthly_compensation = round(item.monthly_compensation, 2)
            row.sss_bracket = item.sss_bracket
            row.employee_contribution = round(item.employee_contribution, 2)
            row.employer_contribution = round(item.employer_contribution, 2)
            row.ec_contribution = round(item.ec_contribution, 2)
            row.total_contribution = round(
                item.employee_contribution + item.employer_contribution + item.ec_contribution, 2
            )
        await self.session.flush()
        self.audit.record(
            "created",
            "SSSReport",
            None,
            f"{period.name} {payload.month}",
            f"Imported {len(payload.rows)} SSS contribution row(s)",
        )
        await self.session.commit()
        logger.info("Imported %s SSS rows for period %s", len(payload.rows), period.id)
        return len(payload.rows)

    async def index_props(
        self,
        period_id: Optional[int] = None,
        month: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        statement = (
            select(SSSContribution)
            .join(Employee, SSSContribution.employee_id == Employee.id)
            .where(SSSContribution.account_id == self.account_id)
        )
        if period_id:
            statement = statement.where(SSSContribution.payroll_period_id == period_id)
        if clean(month):
            statement = statement.where(SSSContribution.month == month)
        statement = apply_search(statement, search, Employee.full_name, Employee.code, Employee.sss_number)
        result = await self.session.execute(
            statement.order_by(SSSContribution.month.desc(), Employee.full_name)
        )
        rows = list(result.scalars().all())

        reports = list(
            (
                await self.session.execute(
                    select(SSSReport)
                    .where(SSSReport.account_id == self.account_id)
                    .order_by(SSSReport.month.desc(), SSSReport.id.desc())
                )
            )
            .scalars()
            .all()
        )
        remitted = [
            r.payment_date or r.submitted_at.date()
            for r in reports
            if r.status == "submitted" and (r.payment_date or r.submitted_at)
        ]
        totals = _totals(rows)
        latest_month = max((row.month for row in rows), default=None)
        summary: Dict[str, Any] = {
            "total_monthly_compensation": totals["monthly_compensation"],
            "total_employee_share": totals["employee_share"],
            "total_employer_share": totals["employer_share"],
            "total_ec_share": totals["ec_share"],
            "total_contribution": totals["total_contribution"],
            "employee_count": len({row.employee_id for row in rows}),
            "last_remittance_date": iso(max(remitted)) if remitted else None,
            "next_due_date": iso(due_date_for(latest_month)) if latest_month else None,
            "pending_remittances": sum(1 for r in reports if r.status != "submitted"),
        }
        for key in list(summary):
            if key.startswith("total_"):
                summary[f"formatted_{key}"] = format_currency(summary[key])
                summary[f"compact_{key}"] = format_compact_currency(summary[key])
        return {
            "contributions": [contribution_props(row) for row in rows],
            "summary": summary,
            "periods": await self.period_options(),
            "r3_reports": [report_props(r) for r in reports],
            "filters": filter_state(period_id=period_id, month=month, search=search),
        }

    async def generate_r3(self, period_id: int, month: str) -> SSSReport:
        period = await self.period_or_invalid(period_id, field="period_id")
        rows = await self._contributions(period.id, month)
        if not rows:
            raise PayrollValidationError(
                "No SSS contributions found for this period and month", field="month"
            )
        now = datetime.utcnow()
        totals = _totals(rows)
        report = SSSReport(
            account_id=self.account_id,
            payroll_period_id=period.id,
            month=month,
            report_type="R3",
            file_name=f"SSS_R3_{month}_{now:%Y%m%d%H%M%S}.csv",
            content=render_r3(rows, month, now),
            total_employees=len(rows),
            total_compensation=totals["monthly_compensation"],
            total_contribution=totals["total_contribution"],
            status="generated",
            due_date=due_date_for(month),
            generated_by=self.user.display_name,
        )
        self.session.add(report)
        await self.session.flush()
        self.audit.record(
            "generated",
            "SSSReport",
            report.id,
            report.file_name,
            f"Generated R3 for {month_label(month)} covering {len(rows)} employees",
            new_values={"total_contribution": report.total_contribution, "total_employees": len(rows)},
        )
        await self.session.commit()
        logger.info("Generated SSS R3 report %s for %s", report.id, month)
        return await self.get_report(report.id)

    async def contribution_summary(self, period_id: int) -> tuple[str, str]:
        period = await self.period_or_invalid(period_id, field="period_id")
        rows = await self._contributions(period.id)
        file_name = f"SSS_Contributions_{period.id}_{datetime.utcnow():%Y%m%d%H%M%S}.csv"
        return file_name, render_contribution_summary(rows, period)

    async def submit(self, report_id: int, payload: R3Submit) -> SSSReport:
        report = await self.get_report(report_id)
        if report.status == "submitted":
            raise InvalidStateError("This report has already been submitted")
        report.status = "submitted"
        report.submitted_at = datetime.utcnow()
        report.reference_number = payload.reference_number
        report.payment_date = payload.payment_date
        self.audit.record(
            "submitted",
            "SSSReport",
            report.id,
            report.file_name,
            f"Submitted R3 for {month_label(report.month)}",
            old_values={"status": "generated"},
            new_values={"status": "submitted", "reference_number": payload.reference_number},
        )
        await self.session.commit()
        logger.info("SSS report %s submitted", report.id)
        return await self.get_report(report.id)
