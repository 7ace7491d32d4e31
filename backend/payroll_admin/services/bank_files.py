"""Bank payroll upload files: generation, validation, upload tracking."""
from __future__ import annotations

import csv
import hashlib
import io
import logging
from datetime import datetime
from typing import Any, Dict, List, Tuple

from openpyxl import Workbook
from sqlalchemy import select

from ..exceptions import InvalidStateError
from ..models import BankFile, PayrollCalculation, PayrollPeriod
from ..presenters.badges import badge
from ..presenters.formatting import format_currency, format_file_size, format_timestamp
from ..schemas.bank_files import BankFileGenerate, BankFileUpload
from ..websocket_manager import broadcast_payroll_event
from .base import TenantService

logger = logging.getLogger(__name__)

BANKS: Dict[str, Dict[str, Any]] = {
    "BPI": {"name": "Bank of the Philippine Islands", "account_length": 10},
    "BDO": {"name": "BDO Unibank", "account_length": 12},
    "Metrobank": {"name": "Metropolitan Bank and Trust Company", "account_length": 13},
    "PNB": {"name": "Philippine National Bank", "account_length": 12},
    "RCBC": {"name": "Rizal Commercial Banking Corporation", "account_length": 10},
    "Unionbank": {"name": "Union Bank of the Philippines", "account_length": 12},
}

FILE_FORMATS = ("csv", "txt", "excel", "fixed_width")
EXTENSIONS = {"csv": "csv", "txt": "txt", "excel": "xlsx", "fixed_width": "txt"}
MEDIA_TYPES = {
    "csv": "text/csv",
    "txt": "text/plain",
    "fixed_width": "text/plain",
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
COLUMNS = ["account_number", "employee_name", "employee_number", "amount"]
GENERATABLE_STATUSES = ("approved", "bank_file_generated")
NAME_WIDTH = 40


def _delimited(records: List[Dict[str, Any]], delimiter: str) -> bytes:
    output = io.StringIO()
    writer = csv.DictWriter(
        output, fieldnames=COLUMNS, delimiter=delimiter, extrasaction="ignore", lineterminator="\n"
    )
    writer.writeheader()
    for record in records:
        writer.writerow({**record, "amount": f"{record['amount']:.2f}"})
    return output.getvalue().encode("utf-8")


def _fixed_width(records: List[Dict[str, Any]]) -> bytes:
    lines = [
        f"{record['account_number']:<16.16}"
        f"{record['employee_name'].upper():<{NAME_WIDTH}.{NAME_WIDTH}}"
        f"{record['employee_number']:<15.15}"
        f"{record['amount']:>15.2f}"
        for record in records
    ]
    total = sum(record["amount"] for record in records)
    lines.append(f"T{len(records):>10}{total:>20.2f}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def _excel(records: List[Dict[str, Any]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Payroll"
    sheet.append(["Account Number", "Employee Name", "Employee Number", "Amount"])
    for record in records:
        sheet.append(
            [record["account_number"], record["employee_name"], record["employee_number"], record["amount"]]
        )
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def render_bank_file(records: List[Dict[str, Any]], file_format: str) -> bytes:
    if file_format == "csv":
        return _delimited(records, ",")
    if file_format == "txt":
        return _delimited(records, "\t")
    if file_format == "fixed_width":
        return _fixed_width(records)
    if file_format == "excel":
        return _excel(records)
    raise ValueError(f"Unsupported bank file format: {file_format}")


def bank_file_name(bank_name: str, file_format: str, when: datetime) -> str:
    return f"{bank_name.upper()}_PAYROLL_{when:%Y%m%d%H%M%S}.{EXTENSIONS[file_format]}"


def validate_records(records: List[Dict[str, Any]], bank_name: str) -> List[Dict[str, Any]]:
    """Return one issue dict per problem found; severity is ``error`` or ``warning``."""

    expected_length = BANKS.get(bank_name, {}).get("account_length")
    issues: List[Dict[str, Any]] = []

    def issue(record, field, message, severity):
        issues.append(
            {
                "employee_id": record.get("employee_id"),
                "employee_name": record.get("employee_name"),
                "field": field,
                "message": message,
                "severity": severity,
            }
        )

    for record in records:
        account = str(record.get("account_number") or "")
        if not account:
            issue(record, "account_number", "Bank account number is missing", "error")
        elif not account.isdigit():
            issue(record, "account_number", "Bank account number must contain digits only", "error")
        elif expected_length and len(account) != expected_length:
            issue(
                record,
                "account_number",
                f"{bank_name} account numbers are usually {expected_length} digits",
                "warning",
            )
        if float(record.get("amount") or 0) <= 0:
            issue(record, "amount", "Net pay must be greater than 0", "error")
        if len(record.get("employee_name") or "") > NAME_WIDTH:
            issue(
                record,
                "employee_name",
                f"Name exceeds {NAME_WIDTH} characters and will be truncated",
                "warning",
            )
    return issues


def bank_file_props(bank_file: BankFile) -> Dict[str, Any]:
    period = bank_file.period
    return {
        "id": bank_file.id,
        "payroll_period_id": bank_file.payroll_period_id,
        "period_name": period.name if period is not None else None,
        "bank_name": bank_file.bank_name,
        "file_name": bank_file.file_name,
        "file_format": bank_file.file_format,
        "file_size": bank_file.file_size,
        "formatted_file_size": format_file_size(bank_file.file_size),
        "file_hash": bank_file.file_hash,
        "total_employees": bank_file.total_employees,
        "total_amount": bank_file.total_amount,
        "formatted_total_amount": format_currency(bank_file.total_amount),
        "status": bank_file.status,
        "status_badge": badge("bank_file_status", bank_file.status),
        "generated_by": bank_file.generated_by,
        "generated_at": bank_file.generated_at,
        "formatted_generated_at": format_timestamp(bank_file.generated_at),
        "uploaded_at": bank_file.uploaded_at,
        "formatted_uploaded_at": format_timestamp(bank_file.uploaded_at),
        "confirmation_method": bank_file.confirmation_method,
        "confirmation_number": bank_file.confirmation_number,
        "download_url": f"/payroll/bank-files/{bank_file.id}/download",
    }


class BankFileService(TenantService):
    async def get(self, bank_file_id: int) -> BankFile:
        return await self._get(BankFile, bank_file_id, "Bank file")

    async def index_props(self) -> Dict[str, Any]:
        result = await self.session.execute(
            select(BankFile)
            .where(BankFile.account_id == self.account_id)
            .order_by(BankFile.generated_at.desc(), BankFile.id.desc())
        )
        return {
            "bankFiles": [bank_file_props(f) for f in result.scalars().all()],
            "periods": await self.period_options(GENERATABLE_STATUSES),
            "bankList": [
                {"code": code, "name": bank["name"], "formats": list(FILE_FORMATS)}
                for code, bank in BANKS.items()
            ],
            "employeesCount": await self.active_employee_count(),
        }

    async def _records(self, period: PayrollPeriod) -> Tuple[PayrollCalculation, List[Dict[str, Any]]]:
        result = await self.session.execute(
            select(PayrollCalculation)
            .where(
                PayrollCalculation.account_id == self.account_id,
                PayrollCalculation.payroll_period_id == period.id,
                PayrollCalculation.status.in_(("completed", "approved")),
            )
            .order_by(PayrollCalculation.calculation_date.desc(), PayrollCalculation.id.desc())
            .limit(1)
        )
        calculation = result.scalar_one_or_none()
        if calculation is None:
            raise InvalidStateError("The period has no completed payroll calculation")
        records = [
            {
                "employee_id": row.employee_id,
                "account_number": row.employee.bank_account_number,
                "employee_name": row.employee.full_name,
                "employee_number": row.employee.code,
                "amount": round(row.net_pay, 2),
            }
            for row in calculation.employee_calculations
            if row.status == "completed"
        ]
        records.sort(key=lambda record: record["employee_name"])
        return calculation, records

    def _fill(self, bank_file: BankFile, records: List[Dict[str, Any]]) -> None:
        now = datetime.utcnow()
        content = render_bank_file(records, bank_file.file_format)
        bank_file.file_name = bank_file_name(bank_file.bank_name, bank_file.file_format, now)
        bank_file.content = content
        bank_file.file_size = len(content)
        bank_file.file_hash = hashlib.sha256(content).hexdigest()
        bank_file.records = records
        bank_file.total_employees = len(records)
        bank_file.total_amount = round(sum(record["amount"] for record in records), 2)
        bank_file.status = "generated"
        bank_file.generated_by = self.user.display_name
        bank_file.generated_at = now

    async def generate(self, payload: BankFileGenerate) -> BankFile:
        period = await self.period_or_invalid(payload.period_id, field="period_id")
        if period.status not in GENERATABLE_STATUSES:
            raise InvalidStateError("Bank files can only be generated for approved payroll periods")
        _, records = await self._records(period)

        bank_file = BankFile(
            account_id=self.account_id,
            payroll_period_id=period.id,
            bank_name=payload.bank_name,
            file_format=payload.file_format,
        )
        self._fill(bank_file, records)
        self.session.add(bank_file)
        period.status = "bank_file_generated"
        await self.session.flush()
        self.audit.record(
            "generated",
            "BankFile",
            bank_file.id,
            bank_file.file_name,
            f"Generated {payload.bank_name} file for {len(records)} employees",
            new_values={
                "total_employees": bank_file.total_employees,
                "total_amount": bank_file.total_amount,
            },
        )
        await self.session.commit()
        logger.info("Generated bank file %s (%s)", bank_file.id, bank_file.file_name)
        await broadcast_payroll_event(
            self.account_id,
            "payroll.bank_file.generated",
            {"bank_file_id": bank_file.id, "period_id": period.id, "file_name": bank_file.file_name},
        )
        return await self.get(bank_file.id)

    async def validate(self, bank_file_id: int) -> Dict[str, Any]:
        bank_file = await self.get(bank_file_id)
        records = list(bank_file.records or [])
        issues = validate_records(records, bank_file.bank_name)
        errors = [i for i in issues if i["severity"] == "error"]
        warnings = [i for i in issues if i["severity"] == "warning"]
        invalid_ids = {i["employee_id"] for i in errors}

        previous = bank_file.status
        if bank_file.status != "uploaded":
            bank_file.status = "failed" if errors else "validated"
        self.audit.record(
            "updated",
            "BankFile",
            bank_file.id,
            bank_file.file_name,
            f"Validated bank file: {len(errors)} error(s), {len(warnings)} warning(s)",
            old_values={"status": previous},
            new_values={"status": bank_file.status},
        )
        await self.session.commit()
        logger.info("Validated bank file %s: %s errors", bank_file.id, len(errors))
        return {
            "success": not errors,
            "message": "Bank file is valid" if not errors else "Bank file has validation errors",
            "status": bank_file.status,
            "total_records": len(records),
            "valid_records": sum(1 for r in records if r.get("employee_id") not in invalid_ids),
            "warning_count": len(warnings),
            "error_count": len(errors),
            "errors": issues,
        }

    async def upload(self, bank_file_id: int, payload: BankFileUpload) -> BankFile:
        bank_file = await self.get(bank_file_id)
        if bank_file.status == "failed":
            raise InvalidStateError("Failed bank files cannot be uploaded")
        if bank_file.status == "uploaded":
            raise InvalidStateError("This bank file has already been uploaded")
        previous = bank_file.status
        bank_file.status = "uploaded"
        bank_file.uploaded_at = datetime.utcnow()
        bank_file.confirmation_method = payload.confirmation_method
        bank_file.confirmation_number = f"BF-{bank_file.id:08d}"
        self.audit.record(
            "uploaded",
            "BankFile",
            bank_file.id,
            bank_file.file_name,
            f"Uploaded to {bank_file.bank_name} ({payload.confirmation_method})",
            old_values={"status": previous},
            new_values={"status": "uploaded", "confirmation_number": bank_file.confirmation_number},
        )
        await self.session.commit()
        logger.info("Bank file %s uploaded", bank_file.id)
        return await self.get(bank_file.id)

    async def regenerate(self, bank_file_id: int) -> BankFile:
        bank_file = await self.get(bank_file_id)
        if bank_file.status == "uploaded":
            raise InvalidStateError("Uploaded bank files cannot be regenerated")
        _, records = await self._records(bank_file.period)
        previous_name = bank_file.file_name
        self._fill(bank_file, records)
        bank_file.uploaded_at = None
        bank_file.confirmation_method = None
        bank_file.confirmation_number = None
        self.audit.record(
            "generated",
            "BankFile",
            bank_file.id,
            bank_file.file_name,
            f"Regenerated {previous_name}",
            new_values={
                "total_employees": bank_file.total_employees,
                "total_amount": bank_file.total_amount,
            },
        )
        await self.session.commit()
        logger.info("Regenerated bank file %s", bank_file.id)
        return await self.get(bank_file.id)

    @staticmethod
    def media_type(bank_file: BankFile) -> str:
        return MEDIA_TYPES.get(bank_file.file_format, "application/octet-stream")
