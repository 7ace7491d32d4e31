"""SQLAlchemy models exposed by the backend."""
from .adjustment import PayrollAdjustment
from .advance import AdvanceDeduction, CashAdvance
from .audit_log import AuditLog
from .bank_file import BankFile
from .base import Base
from .calculation import EmployeeCalculation, PayrollCalculation
from .employee import Employee
from .loan import EmployeeLoan, LoanPayment
from .period import PayrollPeriod
from .sss import SSSContribution, SSSReport
from .user import User

__all__ = [
    "AdvanceDeduction",
    "AuditLog",
    "BankFile",
    "Base",
    "CashAdvance",
    "Employee",
    "EmployeeCalculation",
    "EmployeeLoan",
    "LoanPayment",
    "PayrollAdjustment",
    "PayrollCalculation",
    "PayrollPeriod",
    "SSSContribution",
    "SSSReport",
    "User",
]
