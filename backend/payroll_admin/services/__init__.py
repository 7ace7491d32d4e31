"""Tenant-scoped payroll services used by the API routers."""
from .adjustments import AdjustmentService
from .advances import AdvanceService
from .audit import AuditTrail
from .bank_files import BankFileService
from .calculations import CalculationService
from .dashboard import DashboardService
from .loans import LoanService
from .periods import PeriodService
from .sss import SSSService

__all__ = [
    "AdjustmentService",
    "AdvanceService",
    "AuditTrail",
    "BankFileService",
    "CalculationService",
    "DashboardService",
    "LoanService",
    "PeriodService",
    "SSSService",
]
