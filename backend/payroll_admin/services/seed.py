"""Demo dataset for local development (``python -m payroll_admin seed-demo``)."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import (
    AdvanceDeduction,
    CashAdvance,
    Employee,
    EmployeeLoan,
    PayrollPeriod,
    SSSContribution,
)
from .advances import split_installments
from .loans import add_months

logger = logging.getLogger(__name__)

DEMO_EMPLOYEES = [
    ("EMP-001", "Juan Dela Cruz", "Mining Operations", "Heavy Equipment Operator", 28000.0, "BDO", "001234567890"),
    ("EMP-002", "Maria Santos", "Accounting", "Payroll Specialist", 35000.0, "BPI", "1234567890"),
    ("EMP-003", "Pedro Reyes", "Maintenance", "Mechanic", 24000.0, "Metrobank", "0011223344556"),
    ("EMP-004", "Ana Garcia", "Human Resources", "HR Officer", 32000.0, "BDO", "009876543210"),
    ("EMP-005", "Miguel Torres", "Information Technology", "Systems Administrator", 42000.0, "PNB", "112233445566"),
    ("EMP-006", "Rosa Mendoza", "Finance", "Finance Analyst", 38000.0, "RCBC", "5566778899"),
]

DEMO_PERIODS = [
    ("October 1-15, 2025", date(2025, 10, 1), date(2025, 10, 15), date(2025, 10, 13), date(2025, 10, 20), "closed"),
    ("October 16-31, 2025", date(2025, 10, 16), date(2025, 10, 31), date(2025, 10, 29), date(2025, 11, 5), "paid"),
    ("November 1-15, 2025", date(2025, 11, 1), date(2025, 11, 15), date(2025, 11, 13), date(2025, 11, 20), "draft"),
]


def _sss_shares(compensation: float) -> Dict[str, float]:
    """Illustrative EE/ER/EC shares; real figures arrive from the calculation engine."""

    credit = min(max(round(compensation / 500) * 500, 5000), 35000)
    return {
        "sss_bracket": f"MSC {credit:,.0f}",
        "employee_contribution": round(credit * 0.05, 2),
        "employer_contribution": round(credit * 0.10, 2),
        "ec_contribution": 10.0 if credit < 15000 else 30.0,
    }


async def seed_demo(session: AsyncSession, account_id: str) -> Dict[str, int]:
    """Load demo employees, periods, advances, loans and SSS rows for ``account_id``."""

    existing = await session.execute(
        select(func.count(Employee.id)).where(Employee.account_id == account_id)
    )
    if existing.scalar_one():
        logger.info("Tenant %s already has employees; skipping demo seed", account_id)
        return {}

    employees = [
        Employee(
            account_id=account_id,
            code=code,
            full_name=name,
            email=f"{name.split()[0].lower()}@example.com",
            department=department,
            position=position,
            join_date=date(2023, 1, 9),
            basic_salary=salary,
            employment_status="active",
            sss_number=f"34-{1000000 + index:07d}-{index}",
            bank_name=bank,
            bank_account_number=account,
        )
        for index, (code, name, department, position, salary, bank, account) in enumerate(DEMO_EMPLOYEES, start=1)
    ]
    session.add_all(employees)

    periods = [
        PayrollPeriod(
            account_id=account_id,
            name=name,
            period_type="semi_monthly",
            start_date=start,
            end_date=end,
            cutoff_date=cutoff,
            pay_date=pay,
            status=status,
            total_employees=len(employees) if status != "draft" else 0,
        )
        for name, start, end, cutoff, pay, status in DEMO_PERIODS
    ]
    session.add_all(periods)
    await session.flush()

    advance = CashAdvance(
        account_id=account_id,
        employee_id=employees[0].id,
        advance_type="Cash Advance",
        amount_requested=10000.0,
        amount_approved=10000.0,
        purpose="Medical emergency for family member",
        requested_date=date(2025, 10, 20),
        approval_status="approved",
        approved_by="System",
        approved_at=datetime(2025, 10, 21, 9, 0),
        deduction_status="active",
        deduction_schedule="installments",
        number_of_installments=4,
        installments_completed=0,
        remaining_balance=10000.0,
        created_by="System",
        updated_by="System",
    )
    balance = 10000.0
    for number, part in enumerate(split_installments(10000.0, 4), start=1):
        balance = round(balance - part, 2)
        advance.deductions.append(
            AdvanceDeduction(installment_number=number, deduction_amount=part, remaining_balance_after=balance)
        )
    session.add(advance)
    session.add(
        CashAdvance(
            account_id=account_id,
            employee_id=employees[1].id,
            advance_type="Travel Advance",
            amount_requested=5000.0,
            purpose="Site visit to the Surigao mine",
            requested_date=date(2025, 11, 3),
            priority_level="urgent",
            remaining_balance=5000.0,
            created_by="System",
            updated_by="System",
        )
    )

    loan_start = date(2025, 7, 1)
    session.add_all(
        [
            EmployeeLoan(
                account_id=account_id,
                employee_id=employees[2].id,
                loan_type="sss",
                loan_number="LOAN-00001",
                principal_amount=20000.0,
                interest_rate=10.0,
                total_amount=22000.0,
                monthly_amortization=916.67,
                number_of_installments=24,
                remaining_balance=22000.0,
                loan_date=date(2025, 6, 15),
                start_date=loan_start,
                maturity_date=add_months(loan_start, 24),
                status="active",
                created_by="System",
            ),
            EmployeeLoan(
                account_id=account_id,
                employee_id=employees[3].id,
                loan_type="pagibig",
                loan_number="LOAN-00002",
                principal_amount=30000.0,
                interest_rate=5.95,
                total_amount=31785.0,
                monthly_amortization=1324.38,
                number_of_installments=24,
                remaining_balance=31785.0,
                loan_date=date(2025, 6, 20),
                start_date=loan_start,
                maturity_date=add_months(loan_start, 24),
                status="active",
                created_by="System",
            ),
        ]
    )

    contribution_period = periods[1]
    for employee in employees:
        shares = _sss_shares(employee.basic_salary)
        session.add(
            SSSContribution(
                account_id=account_id,
                payroll_period_id=contribution_period.id,
                employee_id=employee.id,
                month="2025-10",
                monthly_compensation=employee.basic_salary,
                total_contribution=round(
                    shares["employee_contribution"] + shares["employer_contribution"] + shares["ec_contribution"],
                    2,
                ),
                **shares,
            )
        )

    await session.commit()
    counts = {
        "employees": len(employees),
        "periods": len(periods),
        "advances": 2,
        "loans": 2,
        "sss_contributions": len(employees),
    }
    logger.info("Seeded demo data for %s: %s", account_id, counts)
    return counts
