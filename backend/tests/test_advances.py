"""Integration tests for cash advances."""
import pytest
from httpx import AsyncClient


def request_payload(employee_id, /, **overrides) -> dict:
    payload = {
        "employee_id": employee_id,
        "advance_type": "Cash Advance",
        "amount_requested": 1000,
        "purpose": "Hospital bill for dependent",
        "requested_date": "2025-11-03",
        "priority_level": "urgent",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"amount_requested": 0}, "amount_requested", "Amount must be greater than 0"),
        ({"employee_id": None}, "employee_id", "Please select an employee"),
        ({"purpose": "   "}, "purpose", "Purpose is required"),
    ],
)
async def test_request_validation(
    client: AsyncClient, officer_headers: dict, make_employee, overrides: dict, field: str, message: str
) -> None:
    employee = await make_employee()
    response = await client.post(
        "/payroll/advances", json=request_payload(employee["id"], **overrides), headers=officer_headers
    )
    assert response.status_code == 422
    assert response.json()["errors"][field] == message

    response = await client.get("/payroll/advances", headers=officer_headers)
    assert response.json()["props"]["advances"] == []


@pytest.mark.asyncio
async def test_missing_purpose_field(client: AsyncClient, officer_headers: dict, make_employee) -> None:
    employee = await make_employee()
    payload = request_payload(employee["id"])
    del payload["purpose"]
    response = await client.post("/payroll/advances", json=payload, headers=officer_headers)
    assert response.json()["errors"]["purpose"] == "Purpose is required"


@pytest.mark.asyncio
async def test_installment_deductions(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, make_employee
) -> None:
    employee = await make_employee(department="Accounting")
    response = await client.get("/payroll/advances/create", headers=officer_headers)
    assert "Medical Advance" in response.json()["advance_types"]

    response = await client.post(
        "/payroll/advances", json=request_payload(employee["id"]), headers=officer_headers
    )
    assert response.status_code == 201
    advance = response.json()["advance"]
    assert advance["approval_status"] == "pending"
    assert advance["deduction_status"] == "pending"

    response = await client.post(
        f"/payroll/advances/{advance['id']}/approve",
        json={"amount_approved": 1000, "deduction_schedule": "installments", "number_of_installments": 3},
        headers=officer_headers,
    )
    assert response.status_code == 403

    response = await client.post(
        f"/payroll/advances/{advance['id']}/approve",
        json={"amount_approved": 1000, "deduction_schedule": "installments", "number_of_installments": 3},
        headers=manager_headers,
    )
    approved = response.json()["advance"]
    assert approved["deduction_status"] == "active"
    assert approved["remaining_balance"] == 1000

    response = await client.get(f"/payroll/advances/{advance['id']}/deductions", headers=officer_headers)
    schedule = response.json()
    assert [d["deduction_amount"] for d in schedule["deductions"]] == [333.33, 333.33, 333.34]
    assert [d["remaining_balance_after"] for d in schedule["deductions"]] == [666.67, 333.34, 0.0]
    assert schedule["deductions"][0]["status_color"] == "orange"

    for _ in range(2):
        response = await client.post(f"/payroll/advances/{advance['id']}/deductions", headers=officer_headers)
        assert response.status_code == 200
    assert response.json()["advance"]["remaining_balance"] == 333.34
    assert response.json()["advance"]["deduction_progress"] == 67

    response = await client.post(f"/payroll/advances/{advance['id']}/deductions", headers=officer_headers)
    done = response.json()["advance"]
    assert done["deduction_status"] == "completed"
    assert done["remaining_balance"] == 0
    assert done["installments_completed"] == 3

    response = await client.post(f"/payroll/advances/{advance['id']}/deductions", headers=officer_headers)
    assert response.status_code == 409

    response = await client.get(
        "/payroll/advances", params={"department": "Accounting", "deduction_status": "completed"},
        headers=officer_headers,
    )
    assert len(response.json()["props"]["advances"]) == 1


@pytest.mark.asyncio
async def test_approval_limits_and_rejection(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, make_employee
) -> None:
    employee = await make_employee()
    first = (
        await client.post("/payroll/advances", json=request_payload(employee["id"]), headers=officer_headers)
    ).json()["advance"]

    response = await client.post(
        f"/payroll/advances/{first['id']}/approve",
        json={"amount_approved": 1500, "deduction_schedule": "single_period"},
        headers=manager_headers,
    )
    assert response.status_code == 422
    assert response.json()["errors"]["amount_approved"] == (
        "The approved amount cannot exceed the requested amount"
    )

    response = await client.post(
        f"/payroll/advances/{first['id']}/reject", json={"approval_notes": "too short"}, headers=manager_headers
    )
    assert response.status_code == 422
    assert response.json()["errors"]["approval_notes"] == "Rejection notes must be at least 10 characters"

    response = await client.post(
        f"/payroll/advances/{first['id']}/reject",
        json={"approval_notes": "Outstanding advance not yet settled"},
        headers=manager_headers,
    )
    rejected = response.json()["advance"]
    assert rejected["approval_status"] == "rejected"
    assert rejected["deduction_status"] == "cancelled"

    response = await client.post(
        f"/payroll/advances/{first['id']}/approve",
        json={"amount_approved": 500, "deduction_schedule": "single_period"},
        headers=manager_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_zero_approval_and_early_repayment(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, make_employee, make_period
) -> None:
    employee = await make_employee()
    period = await make_period()
    zero = (
        await client.post("/payroll/advances", json=request_payload(employee["id"]), headers=officer_headers)
    ).json()["advance"]
    response = await client.post(
        f"/payroll/advances/{zero['id']}/approve",
        json={"amount_approved": 0, "deduction_schedule": "single_period"},
        headers=manager_headers,
    )
    assert response.json()["advance"]["deduction_status"] == "completed"
    response = await client.get(f"/payroll/advances/{zero['id']}/deductions", headers=officer_headers)
    assert response.json()["deductions"] == []

    big = (
        await client.post(
            "/payroll/advances", json=request_payload(employee["id"], amount_requested=6000), headers=officer_headers
        )
    ).json()["advance"]
    await client.post(
        f"/payroll/advances/{big['id']}/approve",
        json={"amount_approved": 6000, "deduction_schedule": "installments", "number_of_installments": 6},
        headers=manager_headers,
    )
    await client.post(
        f"/payroll/advances/{big['id']}/deductions",
        json={"payroll_period_id": period["id"]},
        headers=officer_headers,
    )
    response = await client.post(
        f"/payroll/advances/{big['id']}/early-repayment", headers=officer_headers
    )
    settled = response.json()["advance"]
    assert settled["deduction_status"] == "completed"
    assert settled["remaining_balance"] == 0
    assert settled["number_of_installments"] == 2

    response = await client.get(f"/payroll/advances/{big['id']}/deductions", headers=officer_headers)
    schedule = response.json()
    assert [d["deduction_amount"] for d in schedule["deductions"]] == [1000.0, 5000.0]
    assert schedule["deductions"][0]["period_name"] == "November 1-15, 2025"
    assert schedule["percentage_complete"] == 100
