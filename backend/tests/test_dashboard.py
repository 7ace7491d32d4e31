"""Integration tests for the payroll dashboard."""
from datetime import date, datetime, timedelta

import pytest
from httpx import AsyncClient

from conftest import result_row


@pytest.mark.asyncio
async def test_empty_dashboard(client: AsyncClient, manager_headers: dict) -> None:
    response = await client.get("/payroll/dashboard", headers=manager_headers)
    assert response.status_code == 200
    page = response.json()
    assert page["component"] == "Payroll/Dashboard"
    props = page["props"]
    assert props["summary"]["current_period"] is None
    assert props["summary"]["pending_actions"]["total"] == 0
    assert props["summary"]["net_payroll"]["trend"] == "stable"
    assert props["criticalAlerts"] == []
    assert [group["category"] for group in props["quickActions"]][0] == "Payroll Processing"


@pytest.mark.asyncio
async def test_dashboard_summarises_work(
    client: AsyncClient, manager_headers: dict, officer_headers: dict, calculated_period: dict, make_period
) -> None:
    upcoming = date.today() + timedelta(days=30)
    await make_period(
        name="Upcoming",
        start_date=(upcoming - timedelta(days=14)).isoformat(),
        end_date=upcoming.isoformat(),
        cutoff_date=upcoming.isoformat(),
        pay_date=(upcoming + timedelta(days=5)).isoformat(),
    )
    await client.post(
        "/payroll/advances",
        json={
            "employee_id": calculated_period["employees"][0]["id"],
            "advance_type": "Cash Advance",
            "amount_requested": 500,
            "purpose": "Transport",
        },
        headers=officer_headers,
    )

    response = await client.get("/payroll/dashboard", headers=manager_headers)
    props = response.json()["props"]
    summary = props["summary"]
    assert summary["current_period"]["name"] == "Upcoming"
    assert summary["current_period"]["days_until_pay"] == 35
    assert summary["total_employees"]["active"] == 2
    assert summary["net_payroll"]["current"] == 35000.0
    assert summary["net_payroll"]["formatted_current"] == "₱35,000.00"

    pending = summary["pending_actions"]
    assert pending["periods_to_calculate"] == 1
    assert pending["periods_to_review"] == 1
    assert pending["pending_advances"] == 1
    assert pending["total"] == 3

    assert len(props["pendingPeriods"]) == 2
    assert props["recentActivities"][0]["title"] == "Advance created"
    assert props["recentActivities"][0]["relative_time"] == "just now"

    # November 2025 pay date has passed while still calculated
    alert_ids = [alert["id"] for alert in props["criticalAlerts"]]
    assert f"period-{calculated_period['period']['id']}" in alert_ids


@pytest.mark.asyncio
async def test_failed_calculation_raises_alert(
    client: AsyncClient, manager_headers: dict, make_employee, make_period
) -> None:
    employee = await make_employee()
    period = await make_period()
    calculation = (
        await client.post(
            "/payroll/calculations", json={"payroll_period_id": period["id"]}, headers=manager_headers
        )
    ).json()["calculation"]
    await client.post(
        f"/payroll/calculations/{calculation['id']}/results",
        json={"results": [result_row(employee["id"], net_pay=0)]},
        headers=manager_headers,
    )

    response = await client.get("/payroll/dashboard", headers=manager_headers)
    alerts = {alert["id"]: alert for alert in response.json()["props"]["criticalAlerts"]}
    alert = alerts[f"calculation-{calculation['id']}"]
    assert alert["severity"] == "critical"
    assert alert["message"] == "1 employee(s) failed calculation"
    assert alert["severity_badge"]["color"] == "red"
