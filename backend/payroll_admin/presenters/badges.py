"""Status label/colour tables used for badges across payroll screens."""
from __future__ import annotations

from typing import Dict, Optional, Tuple

BADGES: Dict[str, Dict[str, Tuple[str, str]]] = {
    "period_status": {
        "draft": ("Draft", "gray"),
        "importing": ("Importing", "blue"),
        "calculating": ("Calculating", "blue"),
        "calculated": ("Calculated", "yellow"),
        "reviewing": ("Reviewing", "yellow"),
        "approved": ("Approved", "green"),
        "bank_file_generated": ("Bank File Generated", "purple"),
        "paid": ("Paid", "green"),
        "closed": ("Closed", "gray"),
    },
    "calculation_status": {
        "pending": ("Pending", "gray"),
        "processing": ("Processing", "blue"),
        "completed": ("Completed", "green"),
        "failed": ("Failed", "red"),
        "approved": ("Approved", "purple"),
    },
    "adjustment_status": {
        "pending": ("Pending", "yellow"),
        "approved": ("Approved", "green"),
        "rejected": ("Rejected", "red"),
    },
    "adjustment_type": {
        "earning": ("Earning", "green"),
        "deduction": ("Deduction", "red"),
        "correction": ("Correction", "blue"),
        "backpay": ("Backpay", "purple"),
        "refund": ("Refund", "orange"),
    },
    "advance_approval": {
        "pending": ("Pending", "yellow"),
        "approved": ("Approved", "blue"),
        "rejected": ("Rejected", "red"),
    },
    "advance_deduction": {
        "pending": ("Pending", "gray"),
        "active": ("Active", "blue"),
        "completed": ("Completed", "green"),
        "cancelled": ("Cancelled", "red"),
    },
    "loan_status": {
        "active": ("Active", "green"),
        "completed": ("Completed", "blue"),
        "cancelled": ("Cancelled", "red"),
        "restructured": ("Restructured", "yellow"),
    },
    "loan_type": {
        "sss": ("SSS Loan", "indigo"),
        "pagibig": ("Pag-IBIG Loan", "purple"),
        "company": ("Company Loan", "orange"),
        "cash_advance": ("Cash Advance", "pink"),
    },
    "bank_file_status": {
        "generated": ("Generated", "blue"),
        "validated": ("Validated", "purple"),
        "uploaded": ("Uploaded", "green"),
        "failed": ("Failed", "red"),
    },
    "sss_report_status": {
        "generated": ("Generated", "blue"),
        "submitted": ("Submitted", "green"),
    },
    "audit_action": {
        "created": ("Created", "green"),
        "updated": ("Updated", "blue"),
        "deleted": ("Deleted", "red"),
        "calculated": ("Calculated", "blue"),
        "adjusted": ("Adjusted", "yellow"),
        "approved": ("Approved", "green"),
        "rejected": ("Rejected", "red"),
        "finalized": ("Finalized", "purple"),
        "generated": ("Generated", "purple"),
        "uploaded": ("Uploaded", "green"),
        "submitted": ("Submitted", "green"),
        "deducted": ("Deducted", "yellow"),
        "paid": ("Paid", "green"),
        "cancelled": ("Cancelled", "red"),
    },
    "audit_entity": {
        "PayrollPeriod": ("Period", "blue"),
        "PayrollCalculation": ("Calculation", "purple"),
        "PayrollAdjustment": ("Adjustment", "orange"),
        "CashAdvance": ("Advance", "pink"),
        "EmployeeLoan": ("Loan", "indigo"),
        "BankFile": ("Bank File", "green"),
        "SSSReport": ("SSS Report", "yellow"),
    },
    "alert_severity": {
        "critical": ("Critical", "red"),
        "warning": ("Warning", "yellow"),
        "info": ("Info", "blue"),
    },
}


def _title(value: str) -> str:
    return value.replace("_", " ").replace("-", " ").title()


def badge(kind: str, value: Optional[str]) -> Dict[str, str]:
    """Return ``{"label", "color"}`` for ``value`` within badge table ``kind``."""

    if value is None:
        return {"label": "N/A", "color": "gray"}
    label, color = BADGES.get(kind, {}).get(value, (_title(value), "gray"))
    return {"label": label, "color": color}
