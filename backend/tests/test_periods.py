"""Integration tests for payroll periods and their lifecycle."""
import pytest
from httpx import AsyncClient

from conftest import result_row

PERIOD = {
    "name": "November 16-30, 2025",
    "period_type": "semi_monthly",
    "start_date": "2025-11-16",
    "end_date": "2025-11-30",
    "cutoff_date": "2025-11-28",
    "pay_date": "2025-12-05",
}


@pytest.mark.asyncio
async def test_create_period_starts_as_draft(client: AsyncClient, manager_headers: dict) -> None:
    response = await client.post("/payroll/periods", json=PERIOD, headers=manager_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    period = body["period"]
    assert period["status"] == "draft"
    assert period["status_badge"] == {"label": "Draft", "color": "gray"}
    assert period["date_range"] == "Nov 16-30"
    assert period["period_type_label"] == "Semi-Monthly"
    assert period["progress_percentage"] == 0
    assert period["available_actions"] == ["edit", "delete", "calculate"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "field", "message"),
    [
        ({"end_date": "2025-11-10"}, "end_date", "End date must be after start date"),
        ({"end_date": "2025-11-16"}, "end_date", "End date must be after start date"),
        ({"cutoff_date": "2025-12-01"}, "cutoff_date", "Cutoff date must be within the payroll period"),
        ({"pay_date": "2025-11-29"}, "pay_date", "Pay date must be after the payroll end date"),
        ({"pay_date": "2025-11-30"}, "pay_date", "Pay date must be after the payroll end date"),
    ],
)
async def test_period_date_rules(
    client: AsyncClient, manager_headers: dict, overrides: dict, field: str, message: str
) -> None:
    response = await client.post("/payroll/periods", json={**PERIOD, **overrides}, headers=manager_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "The given data was invalid."
    assert body["errors"][field] == message


@pytest.mark.asyncio
async def test_index_is_an_inertia_page_with_filters(
    client: AsyncClient, manager_headers: dict, make_period
) -> None:
    await make_period()
    await make_period(**PERIOD)

    response = await client.get(
        "/payroll/periods", params={"status": "all", "search": "16-30"}, headers=manager_headers
    )
    assert response.status_code == 200
    assert response.headers["x-inertia"] == "true"
    page = response.json()
    assert page["component"] == "Payroll/PayrollProcessing/Periods/Index"
    assert page["url"].startswith("/payroll/periods?")
    assert [p["name"] for p in page["props"]["periods"]] == ["November 16-30, 2025"]
    assert page["props"]["filters"]["status"] is None
    assert page["props"]["filters"]["search"] == "16-30"

    response = await client.get("/payroll/periods", params={"year": 2025}, headers=manager_headers)
    names = [p["name"] for p in response.json()["props"]["periods"]]
    assert names == ["November 16-30, 2025", "November 1-15, 2025"]


@pytest.mark.asyncio
async def test_update_and_delete_only_in_draft(
    client: AsyncClient, manager_headers: dict, calculated_period: dict, make_period
) -> None:
    draft = await make_period(name="Draft period")
    response = await client.put(
        f"/payroll/periods/{draft['id']}", json={**PERIOD, "name": "Renamed"}, headers=manager_headers
    )
    assert response.status_code == 200
    assert response.json()["period"]["name"] == "Renamed"

    locked_id = calculated_period["period"]["id"]
    response = await client.put(f"/payroll/periods/{locked_id}", json=PERIOD, headers=manager_headers)
    assert response.status_code == 409
    response = await client.delete(f"/payroll/periods/{locked_id}", headers=manager_headers)
    assert response.status_code == 409

    response = await client.delete(f"/payroll/periods/{draft['id']}", headers=manager_headers)
    assert response.status_code == 200
    response = await client.get(f"/payroll/periods/{draft['id']}", headers=manager_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_full_lifecycle(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, approved_period: dict
) -> None:
    period_id = approved_period["period"]["id"]
    response = await client.get(f"/payroll/periods/{period_id}", headers=manager_headers)
    period = response.json()["period"]
    assert period["status"] == "approved"
    assert period["approved_by"] == "Manager"
    assert period["progress_percentage"] == 80
    assert period["total_net_pay"] == 35000.0
    assert period["formatted_net_pay"] == "₱35,000.00"

    # mark-paid needs a bank file first
    response = await client.post(f"/payroll/periods/{period_id}/mark-paid", headers=manager_headers)
    assert response.status_code == 409

    response = await client.post(
        "/payroll/bank-files/generate",
        json={"period_id": period_id, "bank_name": "BDO", "file_format": "csv"},
        headers=officer_headers,
    )
    assert response.status_code == 200

    for action, expected in (("mark-paid", "paid"), ("close", "closed")):
        response = await client.post(f"/payroll/periods/{period_id}/{action}", headers=officer_headers)
        assert response.status_code == 200, response.text
        assert response.json()["period"]["status"] == expected
    assert response.json()["period"]["finalized_by"] == "Officer"
    assert response.json()["period"]["progress_percentage"] == 100


@pytest.mark.asyncio
async def test_only_approvers_can_approve_or_reject(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, calculated_period: dict
) -> None:
    period_id = calculated_period["period"]["id"]
    response = await client.post(f"/payroll/periods/{period_id}/review", headers=officer_headers)
    assert response.status_code == 200
    assert response.json()["period"]["status"] == "reviewing"

    response = await client.post(f"/payroll/periods/{period_id}/approve", headers=officer_headers)
    assert response.status_code == 403

    response = await client.post(f"/payroll/periods/{period_id}/reject", json={}, headers=manager_headers)
    assert response.status_code == 422

    response = await client.post(
        f"/payroll/periods/{period_id}/reject",
        json={"reason": "Overtime for ops is missing"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.json()["period"]["status"] == "calculated"


@pytest.mark.asyncio
async def test_transition_from_wrong_status_conflicts(
    client: AsyncClient, manager_headers: dict, make_period
) -> None:
    period = await make_period()
    response = await client.post(f"/payroll/periods/{period['id']}/close", headers=manager_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Cannot close a period that is draft"


@pytest.mark.asyncio
async def test_deleting_a_period_removes_its_runs_and_adjustments(
    client: AsyncClient, manager_headers: dict, make_employee, make_period
) -> None:
    employee = await make_employee()
    period = await make_period()
    response = await client.post(
        "/payroll/calculations",
        json={"payroll_period_id": period["id"], "calculation_type": "regular"},
        headers=manager_headers,
    )
    calculation = response.json()["calculation"]
    response = await client.post(
        f"/payroll/calculations/{calculation['id']}/results",
        json={"results": [result_row(employee["id"], net_pay=1.0)]},
        headers=manager_headers,
    )
    assert response.json()["calculation"]["status"] == "failed"
    response = await client.post(
        "/payroll/adjustments",
        json={
            "payroll_period_id": period["id"],
            "employee_id": employee["id"],
            "adjustment_type": "earning",
            "adjustment_category": "Night differential",
            "amount": 1500,
            "reason": "Unpaid night shift hours",
        },
        headers=manager_headers,
    )
    assert response.status_code == 201, response.text

    # the failed run sent the period back to draft
    response = await client.delete(f"/payroll/periods/{period['id']}", headers=manager_headers)
    assert response.status_code == 200

    response = await client.get(f"/payroll/calculations/{calculation['id']}", headers=manager_headers)
    assert response.status_code == 404
    response = await client.get("/payroll/calculations", headers=manager_headers)
    assert response.json()["props"]["calculations"] == []
    response = await client.get("/payroll/adjustments", headers=manager_headers)
    assert response.json()["props"]["summary"]["pending"] == 0

    response = await client.get("/payroll/dashboard", headers=manager_headers)
    assert response.status_code == 200
    alert_ids = [alert["id"] for alert in response.json()["props"]["criticalAlerts"]]
    assert f"calculation-{calculation['id']}" not in alert_ids
