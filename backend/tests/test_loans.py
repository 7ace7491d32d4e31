"""Integration tests for employee loans."""
import pytest
from httpx import AsyncClient


def loan_payload(employee_id, **overrides) -> dict:
    payload = {
        "employee_id": employee_id,
        "loan_type": "company",
        "principal_amount": 10000,
        "interest_rate": 5,
        "monthly_amortization": 6000,
        "number_of_installments": 2,
        "loan_date": "2025-08-15",
        "start_date": "2025-08-31",
        "notes": "Emergency housing repair",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_loan_computes_totals(client: AsyncClient, officer_headers: dict, make_employee) -> None:
    employee = await make_employee()
    response = await client.post(
        "/payroll/loans", json=loan_payload(employee["id"], number_of_installments=6), headers=officer_headers
    )
    assert response.status_code == 201
    loan = response.json()["loan"]
    assert loan["loan_number"] == "LOAN-00001"
    assert loan["total_amount"] == 10500.0
    assert loan["remaining_balance"] == 10500.0
    assert loan["maturity_date"] == "2026-02-28"
    assert loan["type_badge"] == {"label": "Company Loan", "color": "orange"}
    assert loan["progress_percentage"] == 0

    second = await client.post(
        "/payroll/loans", json=loan_payload(employee["id"], loan_type="sss", interest_rate=None),
        headers=officer_headers,
    )
    assert second.json()["loan"]["loan_number"] == "LOAN-00002"
    assert second.json()["loan"]["total_amount"] == 10000.0


@pytest.mark.asyncio
async def test_loan_validation(client: AsyncClient, officer_headers: dict, make_employee) -> None:
    employee = await make_employee()
    response = await client.post(
        "/payroll/loans", json=loan_payload(None, principal_amount=0), headers=officer_headers
    )
    assert response.status_code == 422
    errors = response.json()["errors"]
    assert errors["employee_id"] == "Please select an employee"
    assert "principal_amount" in errors

    response = await client.post(
        "/payroll/loans", json=loan_payload(employee["id"], loan_type="car"), headers=officer_headers
    )
    assert "loan_type" in response.json()["errors"]


@pytest.mark.asyncio
async def test_payments_are_capped_at_balance(
    client: AsyncClient, officer_headers: dict, make_employee
) -> None:
    employee = await make_employee()
    loan = (
        await client.post("/payroll/loans", json=loan_payload(employee["id"]), headers=officer_headers)
    ).json()["loan"]

    response = await client.post(f"/payroll/loans/{loan['id']}/payments", headers=officer_headers)
    assert response.status_code == 200
    assert response.json()["loan"]["remaining_balance"] == 4500.0
    assert response.json()["loan"]["installments_paid"] == 1

    response = await client.post(
        f"/payroll/loans/{loan['id']}/payments",
        json={"payment_date": "2025-10-31", "remarks": "Final payroll deduction"},
        headers=officer_headers,
    )
    paid = response.json()["loan"]
    assert paid["status"] == "completed"
    assert paid["remaining_balance"] == 0
    assert paid["progress_percentage"] == 100

    response = await client.get(f"/payroll/loans/{loan['id']}", headers=officer_headers)
    payments = response.json()["payments"]
    assert [p["amount"] for p in payments] == [6000.0, 4500.0]
    assert [p["balance_after"] for p in payments] == [4500.0, 0.0]
    assert payments[1]["remarks"] == "Final payroll deduction"

    response = await client.post(f"/payroll/loans/{loan['id']}/payments", headers=officer_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancel_requires_approver_and_reason(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, make_employee
) -> None:
    employee = await make_employee()
    loan = (
        await client.post("/payroll/loans", json=loan_payload(employee["id"]), headers=officer_headers)
    ).json()["loan"]

    reason = {"reason": "Employee separated"}
    response = await client.post(f"/payroll/loans/{loan['id']}/cancel", json=reason, headers=officer_headers)
    assert response.status_code == 403
    response = await client.post(f"/payroll/loans/{loan['id']}/cancel", json={}, headers=manager_headers)
    assert response.status_code == 422

    response = await client.post(f"/payroll/loans/{loan['id']}/cancel", json=reason, headers=manager_headers)
    cancelled = response.json()["loan"]
    assert cancelled["status"] == "cancelled"
    assert cancelled["is_active"] is False

    response = await client.post(f"/payroll/loans/{loan['id']}/cancel", json=reason, headers=manager_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_index_filters(client: AsyncClient, officer_headers: dict, make_employee) -> None:
    ops = await make_employee(department="Operations")
    finance = await make_employee(department="Finance")
    await client.post("/payroll/loans", json=loan_payload(ops["id"], loan_type="sss"), headers=officer_headers)
    await client.post(
        "/payroll/loans", json=loan_payload(finance["id"], loan_type="pagibig"), headers=officer_headers
    )
    await client.post(
        "/payroll/loans", json=loan_payload(finance["id"], loan_type="company"), headers=officer_headers
    )

    response = await client.get(
        "/payroll/loans", params=[("loan_type", "sss"), ("loan_type", "pagibig")], headers=officer_headers
    )
    props = response.json()["props"]
    assert sorted(loan["loan_type"] for loan in props["loans"]) == ["pagibig", "sss"]
    assert props["filters"]["loan_type"] == ["sss", "pagibig"]
    assert props["departments"] == ["Finance", "Operations"]

    response = await client.get("/payroll/loans", params={"department": "Finance"}, headers=officer_headers)
    summary = response.json()["props"]["summary"]
    assert summary["active_loans"] == 2
    assert summary["formatted_total_outstanding"] == "₱21,000.00"
    assert summary["monthly_amortization_total"] == 12000.0

    response = await client.get("/payroll/loans", params={"search": "LOAN-00003"}, headers=officer_headers)
    assert [loan["loan_type"] for loan in response.json()["props"]["loans"]] == ["company"]
