"""create payroll tables"""
from alembic import op
import sqlalchemy as sa

revision = "0001_create_payroll_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False, server_default=""),
        sa.Column("role", sa.String(), nullable=False, server_default="payroll_officer"),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("account_id", "username", name="uq_users_account_username"),
    )
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_account_id", "users", ["account_id"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, server_default=""),
        sa.Column("contact_number", sa.String(), nullable=False, server_default=""),
        sa.Column("position", sa.String(), nullable=False, server_default=""),
        sa.Column("department", sa.String(), nullable=False, server_default=""),
        sa.Column("join_date", sa.Date(), nullable=True),
        sa.Column("exit_date", sa.Date(), nullable=True),
        sa.Column("basic_salary", sa.Float(), nullable=False, server_default="0"),
        sa.Column("employment_status", sa.String(), nullable=False, server_default="active"),
        sa.Column("sss_number", sa.String(), nullable=False, server_default=""),
        sa.Column("bank_name", sa.String(), nullable=False, server_default=""),
        sa.Column("bank_account_number", sa.String(), nullable=False, server_default=""),
        sa.UniqueConstraint("account_id", "code", name="uq_employees_account_code"),
    )
    op.create_index("ix_emp_account_code", "employees", ["account_id", "code"])
    op.create_index("ix_emp_account_fullname", "employees", ["account_id", "full_name"])

    op.create_table(
        "payroll_periods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("period_type", sa.String(), nullable=False, server_default="semi_monthly"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("cutoff_date", sa.Date(), nullable=False),
        sa.Column("pay_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("total_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_gross_pay", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_deductions", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_net_pay", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_employer_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("finalized_by", sa.String(), nullable=True),
        sa.Column("finalized_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_period_account_start", "payroll_periods", ["account_id", "start_date"])
    op.create_index("ix_payroll_periods_status", "payroll_periods", ["status"])

    op.create_table(
        "payroll_calculations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("calculation_type", sa.String(), nullable=False, server_default="regular"),
        sa.Column("status", sa.String(), nullable=False, server_default="pending", index=True),
        sa.Column("calculation_date", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("total_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_gross_pay", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_deductions", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_net_pay", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_employer_cost", sa.Float(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_by", sa.String(), nullable=False, server_default=""),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    money = [
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
    ]
    op.create_table(
        "employee_calculations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "calculation_id",
            sa.Integer(),
            sa.ForeignKey("payroll_calculations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False, index=True),
        *[sa.Column(name, sa.Float(), nullable=False, server_default="0") for name in money],
        sa.Column("status", sa.String(), nullable=False, server_default="completed"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.UniqueConstraint("calculation_id", "employee_id", name="uq_employee_calculations_run_employee"),
    )

    op.create_table(
        "payroll_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False, index=True),
        sa.Column("adjustment_type", sa.String(), nullable=False),
        sa.Column("adjustment_category", sa.String(255), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("reference_number", sa.String(255), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending", index=True),
        sa.Column("requested_by", sa.String(), nullable=False, server_default=""),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "cash_advances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False, index=True),
        sa.Column("advance_type", sa.String(), nullable=False),
        sa.Column("amount_requested", sa.Float(), nullable=False),
        sa.Column("amount_approved", sa.Float(), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("requested_date", sa.Date(), nullable=False),
        sa.Column("priority_level", sa.String(), nullable=False, server_default="normal"),
        sa.Column("approval_status", sa.String(), nullable=False, server_default="pending", index=True),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("approval_notes", sa.Text(), nullable=True),
        sa.Column("deduction_status", sa.String(), nullable=False, server_default="pending", index=True),
        sa.Column("deduction_schedule", sa.String(), nullable=True),
        sa.Column("number_of_installments", sa.Integer(), nullable=True),
        sa.Column("installments_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("remaining_balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(), nullable=False, server_default=""),
        sa.Column("updated_by", sa.String(), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "advance_deductions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "cash_advance_id",
            sa.Integer(),
            sa.ForeignKey("cash_advances.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("installment_number", sa.Integer(), nullable=False),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("deduction_amount", sa.Float(), nullable=False),
        sa.Column("remaining_balance_after", sa.Float(), nullable=False),
        sa.Column("is_deducted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deducted_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "employee_loans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False, index=True),
        sa.Column("loan_type", sa.String(), nullable=False),
        sa.Column("loan_number", sa.String(), nullable=False),
        sa.Column("principal_amount", sa.Float(), nullable=False),
        sa.Column("interest_rate", sa.Float(), nullable=True),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("monthly_amortization", sa.Float(), nullable=False),
        sa.Column("number_of_installments", sa.Integer(), nullable=False),
        sa.Column("installments_paid", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("remaining_balance", sa.Float(), nullable=False),
        sa.Column("loan_date", sa.Date(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("maturity_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active", index=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.String(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False, server_default=""),
        sa.Column("updated_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("account_id", "loan_number", name="uq_employee_loans_account_number"),
    )

    op.create_table(
        "loan_payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "loan_id",
            sa.Integer(),
            sa.ForeignKey("employee_loans.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("installment_number", sa.Integer(), nullable=False),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("balance_after", sa.Float(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(), nullable=False, server_default=""),
    )

    op.create_table(
        "bank_files",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("bank_name", sa.String(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("file_format", sa.String(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("file_hash", sa.String(), nullable=False, server_default=""),
        sa.Column("content", sa.LargeBinary(), nullable=False),
        sa.Column("records", sa.JSON(), nullable=False),
        sa.Column("total_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(), nullable=False, server_default="generated", index=True),
        sa.Column("generated_by", sa.String(), nullable=False, server_default=""),
        sa.Column("generated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("uploaded_at", sa.DateTime(), nullable=True),
        sa.Column("confirmation_method", sa.String(), nullable=True),
        sa.Column("confirmation_number", sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "sss_contributions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("employees.id"), nullable=False, index=True),
        sa.Column("month", sa.String(7), nullable=False, index=True),
        sa.Column("monthly_compensation", sa.Float(), nullable=False),
        sa.Column("sss_bracket", sa.String(), nullable=False),
        sa.Column("employee_contribution", sa.Float(), nullable=False),
        sa.Column("employer_contribution", sa.Float(), nullable=False),
        sa.Column("ec_contribution", sa.Float(), nullable=False),
        sa.Column("total_contribution", sa.Float(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "payroll_period_id", "month", "employee_id", name="uq_sss_contributions_period_month_employee"
        ),
    )

    op.create_table(
        "sss_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column(
            "payroll_period_id",
            sa.Integer(),
            sa.ForeignKey("payroll_periods.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("month", sa.String(7), nullable=False),
        sa.Column("report_type", sa.String(), nullable=False, server_default="R3"),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("total_employees", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_compensation", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_contribution", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(), nullable=False, server_default="generated"),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("reference_number", sa.String(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("generated_by", sa.String(), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "payroll_audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False, index=True),
        sa.Column("user_id", sa.Integer(), nullable=True, index=True),
        sa.Column("user_name", sa.String(), nullable=False, server_default="System"),
        sa.Column("action", sa.String(), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=False, index=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("entity_name", sa.String(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_index("ix_audit_entity", "payroll_audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_account_created", "payroll_audit_logs", ["account_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_audit_account_created", table_name="payroll_audit_logs")
    op.drop_index("ix_audit_entity", table_name="payroll_audit_logs")
    for table in (
        "payroll_audit_logs",
        "sss_reports",
        "sss_contributions",
        "bank_files",
        "loan_payments",
        "employee_loans",
        "advance_deductions",
        "cash_advances",
        "payroll_adjustments",
        "employee_calculations",
        "payroll_calculations",
    ):
        op.drop_table(table)
    op.drop_index("ix_payroll_periods_status", table_name="payroll_periods")
    op.drop_index("ix_period_account_start", table_name="payroll_periods")
    op.drop_table("payroll_periods")
    op.drop_index("ix_emp_account_fullname", table_name="employees")
    op.drop_index("ix_emp_account_code", table_name="employees")
    op.drop_table("employees")
    op.drop_index("ix_users_account_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
