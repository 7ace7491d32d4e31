"""Integration tests for the audit trail report."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_changes_are_recorded_newest_first(
    client: AsyncClient, manager_headers: dict, make_period
) -> None:
    period = await make_period()
    response = await client.put(
        f"/payroll/periods/{period['id']}",
        json={
            "name": "November 1-15, 2025 (revised)",
            "period_type": "semi_monthly",
            "start_date": "2025-11-01",
            "end_date": "2025-11-15",
            "cutoff_date": "2025-11-13",
            "pay_date": "2025-11-21",
        },
        headers=manager_headers,
    )
    assert response.status_code == 200

    response = await client.get("/payroll/reports/audit", headers=manager_headers)
    page = response.json()
    assert page["component"] == "Payroll/Reports/Audit"
    logs = page["props"]["auditLogs"]
    assert [log["action"] for log in logs] == ["updated", "created"]
    assert logs[0]["user_name"] == "Manager"
    assert logs[0]["entity_badge"] == {"label": "Period", "color": "blue"}
    assert logs[0]["relative_time"] == "just now"

    history = {
        row["field_name"]: row
        for row in page["props"]["changeHistory"]
        if row["audit_log_id"] == logs[0]["id"]
    }
    assert set(history) >= {"name", "pay_date"}
    assert history["pay_date"]["formatted_old_value"] == "November 20, 2025"
    assert history["pay_date"]["formatted_new_value"] == "November 21, 2025"
    assert "start_date" not in history


@pytest.mark.asyncio
async def test_audit_filters_and_tenancy(
    client: AsyncClient, manager_headers: dict, approved_period: dict
) -> None:
    from conftest import login_headers

    response = await client.get(
        "/payroll/reports/audit",
        params={"action": "approved", "entity_type": "PayrollPeriod"},
        headers=manager_headers,
    )
    props = response.json()["props"]
    assert len(props["auditLogs"]) == 1
    assert props["filters"]["action"] == "approved"

    response = await client.get("/payroll/reports/audit", params={"search": "calculation"}, headers=manager_headers)
    matched = response.json()["props"]["auditLogs"]
    assert matched
    assert all(log["entity_type"] == "PayrollCalculation" for log in matched)

    response = await client.get(
        "/payroll/reports/audit", params={"date_from": "2000-01-01", "date_to": "2000-01-31"},
        headers=manager_headers,
    )
    assert response.json()["props"]["auditLogs"] == []

    outsider = await login_headers(client, "auditor", "admin", account_id="globex")
    response = await client.get("/payroll/reports/audit", headers=outsider)
    assert response.json()["props"]["auditLogs"] == []
