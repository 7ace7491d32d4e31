"""Integration tests for SSS contributions and R3 reports."""
import pytest
from httpx import AsyncClient


def contribution(employee_id: int, compensation: float = 20000.0) -> dict:
    return {
        "employee_id": employee_id,
        "monthly_compensation": compensation,
        "sss_bracket": f"MSC {compensation:,.0f}",
        "employee_contribution": round(compensation * 0.05, 2),
        "employer_contribution": round(compensation * 0.10, 2),
        "ec_contribution": 30.0,
    }


@pytest.fixture
def contribution_import(calculated_period: dict) -> dict:
    juan, maria = calculated_period["employees"]
    return {
        "period_id": calculated_period["period"]["id"],
        "month": "2025-10",
        "rows": [contribution(juan["id"]), contribution(maria["id"], 30000.0)],
    }


@pytest.mark.asyncio
async def test_import_and_summary(
    client: AsyncClient, officer_headers: dict, contribution_import: dict
) -> None:
    response = await client.post(
        "/payroll/government/sss/contributions", json=contribution_import, headers=officer_headers
    )
    assert response.status_code == 201
    assert response.json()["imported"] == 2

    # re-importing the same month replaces rows instead of duplicating them
    await client.post("/payroll/government/sss/contributions", json=contribution_import, headers=officer_headers)

    response = await client.get("/payroll/government/sss", params={"month": "2025-10"}, headers=officer_headers)
    page = response.json()
    assert page["component"] == "Payroll/Government/SSS/Index"
    props = page["props"]
    assert len(props["contributions"]) == 2
    first = props["contributions"][0]
    assert first["employee"]["name"] == "Juan Dela Cruz"
    assert first["total_contribution"] == 3030.0
    summary = props["summary"]
    assert summary["employee_count"] == 2
    assert summary["total_monthly_compensation"] == 50000.0
    assert summary["formatted_total_contribution"] == "₱7,560.00"
    assert summary["compact_total_monthly_compensation"] == "₱50.0k"
    assert summary["next_due_date"] == "2025-11-10"
    assert summary["last_remittance_date"] is None


@pytest.mark.asyncio
async def test_month_format_is_checked(
    client: AsyncClient, officer_headers: dict, contribution_import: dict
) -> None:
    response = await client.post(
        "/payroll/government/sss/contributions",
        json={**contribution_import, "month": "2025/10"},
        headers=officer_headers,
    )
    assert response.status_code == 422
    assert response.json()["errors"]["month"] == "The month must match the format Y-m"

    period_id = contribution_import["period_id"]
    response = await client.post(
        f"/payroll/government/sss/r3/{period_id}", json={"month": "2025-13"}, headers=officer_headers
    )
    assert response.json()["errors"]["month"] == "The month must match the format Y-m"


@pytest.mark.asyncio
async def test_r3_needs_contributions(client: AsyncClient, officer_headers: dict, make_period) -> None:
    period = await make_period()
    response = await client.post(
        f"/payroll/government/sss/r3/{period['id']}", json={"month": "2025-11"}, headers=officer_headers
    )
    assert response.status_code == 422
    assert response.json()["errors"]["month"] == "No SSS contributions found for this period and month"


@pytest.mark.asyncio
async def test_generate_download_and_submit_r3(
    client: AsyncClient, officer_headers: dict, contribution_import: dict
) -> None:
    await client.post("/payroll/government/sss/contributions", json=contribution_import, headers=officer_headers)
    period_id = contribution_import["period_id"]

    response = await client.post(
        f"/payroll/government/sss/r3/{period_id}", json={"month": "2025-10"}, headers=officer_headers
    )
    assert response.status_code == 201
    report = response.json()["report"]
    assert report["status"] == "generated"
    assert report["month_label"] == "October 2025"
    assert report["due_date"] == "2025-11-10"
    assert report["total_employees"] == 2
    assert report["file_name"].startswith("SSS_R3_2025-10_")

    response = await client.get(report["download_url"], headers=officer_headers)
    lines = response.text.splitlines()
    assert lines[0] == "SSS R3 MONTHLY CONTRIBUTION REPORT"
    assert lines[1] == "Report Period: 2025-10"
    header = lines.index(
        "SEQUENCE,SSS_NUMBER,EMPLOYEE_NAME,MONTHLY_COMPENSATION,EMPLOYEE_SHARE,EMPLOYER_SHARE,EC_SHARE,TOTAL_CONTRIBUTION"
    )
    assert lines[header + 1] == "1,34-0000001-1,Juan Dela Cruz,20000.00,1000.00,2000.00,30.00,3030.00"
    assert "SUMMARY" in lines
    assert "Grand Total: ₱7,560.00" in lines

    response = await client.post(
        f"/payroll/government/sss/r3/{report['id']}/submit",
        json={"reference_number": "PRN-123456", "payment_date": "2025-11-08"},
        headers=officer_headers,
    )
    submitted = response.json()["report"]
    assert submitted["status"] == "submitted"
    assert submitted["reference_number"] == "PRN-123456"

    response = await client.post(f"/payroll/government/sss/r3/{report['id']}/submit", headers=officer_headers)
    assert response.status_code == 409

    response = await client.get("/payroll/government/sss", headers=officer_headers)
    summary = response.json()["props"]["summary"]
    assert summary["last_remittance_date"] == "2025-11-08"
    assert summary["pending_remittances"] == 0


@pytest.mark.asyncio
async def test_contribution_summary_download(
    client: AsyncClient, officer_headers: dict, contribution_import: dict
) -> None:
    await client.post("/payroll/government/sss/contributions", json=contribution_import, headers=officer_headers)
    period_id = contribution_import["period_id"]
    response = await client.get(
        f"/payroll/government/sss/contributions/{period_id}/download", headers=officer_headers
    )
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "SSS CONTRIBUTIONS SUMMARY REPORT"
    assert "SSS_BRACKET" in next(line for line in lines if line.startswith("SEQUENCE"))
    assert "Total Employees: 2" in lines
