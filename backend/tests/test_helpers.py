"""Unit tests for the pure payroll helpers."""
from datetime import date

import pytest

from payroll_admin.filters import clean, clean_list, filter_state
from payroll_admin.services.advances import split_installments
from payroll_admin.services.audit import build_change_history, infer_value_type
from payroll_admin.services.bank_files import render_bank_file, validate_records
from payroll_admin.services.calculations import reconciles
from payroll_admin.services.loans import add_months
from payroll_admin.services.sss import due_date_for, month_label
from payroll_admin.models import AuditLog
from payroll_admin.schemas.sss import check_month
from payroll_admin.schemas.calculations import EmployeeCalculationRow


def test_split_installments_last_absorbs_remainder() -> None:
    assert split_installments(1000, 3) == [333.33, 333.33, 333.34]
    assert split_installments(500, 1) == [500]
    assert sum(split_installments(10000, 7)) == pytest.approx(10000)
    with pytest.raises(ValueError):
        split_installments(100, 0)


def test_add_months_clamps_to_month_end() -> None:
    assert add_months(date(2025, 1, 31), 6) == date(2025, 7, 31)
    assert add_months(date(2025, 8, 31), 6) == date(2026, 2, 28)
    assert add_months(date(2025, 11, 15), 2) == date(2026, 1, 15)


def test_sss_due_dates() -> None:
    assert due_date_for("2025-10") == date(2025, 11, 10)
    assert due_date_for("2025-12") == date(2026, 1, 10)
    assert month_label("2025-10") == "October 2025"


def test_check_month_rejects_trailing_characters() -> None:
    assert check_month("2025-11") == "2025-11"
    for value in ("2025-11\n", "2025-11-01", " 2025-11", "2025-13"):
        with pytest.raises(ValueError):
            check_month(value)


def test_reconciles_within_a_cent() -> None:
    row = EmployeeCalculationRow(
        employee_id=1, basic_salary=100, gross_pay=100, total_deductions=10, net_pay=90.01
    )
    assert reconciles(row)
    row.net_pay = 89.5
    assert not reconciles(row)


def test_infer_value_type() -> None:
    assert infer_value_type("amount") == "currency"
    assert infer_value_type("total_net_pay") == "currency"
    assert infer_value_type("remaining_balance") == "currency"
    assert infer_value_type("pay_date") == "date"
    assert infer_value_type("approved_at") == "date"
    assert infer_value_type("processed_employees") == "number"
    assert infer_value_type("status") == "string"


def test_build_change_history_skips_unchanged_fields() -> None:
    from datetime import datetime

    log = AuditLog(
        id=7,
        account_id="acme",
        user_name="Manager",
        action="updated",
        entity_type="PayrollPeriod",
        entity_id=1,
        entity_name="November 1-15, 2025",
        old_values={"name": "Nov A", "pay_date": "2025-11-20", "status": "draft"},
        new_values={"name": "Nov B", "pay_date": "2025-11-21", "status": "draft"},
        created_at=datetime(2025, 11, 15, 9, 0),
    )
    history = build_change_history([log])
    assert [row["field_name"] for row in history] == ["name", "pay_date"]
    assert history[1]["formatted_new_value"] == "November 21, 2025"
    assert history[1]["field_label"] == "Pay Date"


def test_filters_treat_all_and_blank_as_unset() -> None:
    assert clean("all") is None
    assert clean("  ") is None
    assert clean(" draft ") == "draft"
    assert clean_list(["sss", "all", ""]) == ["sss"]
    assert filter_state(status="all", loan_type=["sss"], year=2025) == {
        "status": None,
        "loan_type": ["sss"],
        "year": 2025,
    }


RECORDS = [
    {"employee_id": 1, "account_number": "001234567890", "employee_name": "Juan Dela Cruz",
     "employee_number": "EMP-001", "amount": 17500.0},
    {"employee_id": 2, "account_number": "12-34", "employee_name": "Maria Santos",
     "employee_number": "EMP-002", "amount": 0.0},
]


def test_validate_records_reports_errors_and_warnings() -> None:
    issues = validate_records(RECORDS, "BPI")
    by_employee = {(i["employee_id"], i["field"]): i for i in issues}
    assert by_employee[(1, "account_number")]["severity"] == "warning"
    assert by_employee[(2, "account_number")]["severity"] == "error"
    assert by_employee[(2, "amount")]["message"] == "Net pay must be greater than 0"
    assert validate_records(RECORDS[:1], "BDO") == []


def test_fixed_width_layout() -> None:
    lines = render_bank_file(RECORDS[:1], "fixed_width").decode().splitlines()
    assert len(lines) == 2
    assert len(lines[0]) == 16 + 40 + 15 + 15
    assert lines[0][16:56].rstrip() == "JUAN DELA CRUZ"
    assert lines[0].endswith("17500.00")
    assert lines[1].startswith("T")
    assert lines[1].endswith("17500.00")


def test_delimited_layouts() -> None:
    csv_lines = render_bank_file(RECORDS, "csv").decode().splitlines()
    assert csv_lines[0] == "account_number,employee_name,employee_number,amount"
    assert csv_lines[1] == "001234567890,Juan Dela Cruz,EMP-001,17500.00"
    txt_lines = render_bank_file(RECORDS, "txt").decode().splitlines()
    assert txt_lines[2].split("\t") == ["12-34", "Maria Santos", "EMP-002", "0.00"]
    with pytest.raises(ValueError):
        render_bank_file(RECORDS, "pdf")
