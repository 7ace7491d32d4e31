"""Integration tests for bank file generation and upload tracking."""
import io

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook


async def _generate(client: AsyncClient, headers: dict, period_id: int, bank: str = "BDO", fmt: str = "csv"):
    return await client.post(
        "/payroll/bank-files/generate",
        json={"period_id": period_id, "bank_name": bank, "file_format": fmt},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_generation_requires_approved_period(
    client: AsyncClient, officer_headers: dict, calculated_period: dict
) -> None:
    response = await _generate(client, officer_headers, calculated_period["period"]["id"])
    assert response.status_code == 409

    response = await _generate(client, officer_headers, 999)
    assert response.status_code == 422
    assert response.json()["errors"]["period_id"] == "The selected payroll period is invalid"

    response = await client.post(
        "/payroll/bank-files/generate",
        json={"period_id": calculated_period["period"]["id"], "bank_name": "Citibank"},
        headers=officer_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_generate_csv_and_download(
    client: AsyncClient, officer_headers: dict, approved_period: dict
) -> None:
    period_id = approved_period["period"]["id"]
    response = await _generate(client, officer_headers, period_id)
    assert response.status_code == 200
    body = response.json()
    bank_file = body["file"]
    assert bank_file["status"] == "generated"
    assert bank_file["file_name"].startswith("BDO_PAYROLL_")
    assert bank_file["file_name"].endswith(".csv")
    assert bank_file["total_employees"] == 2
    assert bank_file["total_amount"] == 35000.0
    assert len(bank_file["file_hash"]) == 64
    assert body["download_url"] == f"/payroll/bank-files/{bank_file['id']}/download"

    response = await client.get(f"/payroll/periods/{period_id}", headers=officer_headers)
    assert response.json()["period"]["status"] == "bank_file_generated"

    response = await client.get(body["download_url"], headers=officer_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert bank_file["file_name"] in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "account_number,employee_name,employee_number,amount"
    assert lines[1] == "000000000001,Juan Dela Cruz,E-001,17500.00"
    assert len(lines) == 3

    response = await client.get("/payroll/bank-files", headers=officer_headers)
    page = response.json()
    assert page["component"] == "Payroll/Payments/BankFiles/Index"
    assert [f["id"] for f in page["props"]["bankFiles"]] == [bank_file["id"]]
    assert {bank["code"] for bank in page["props"]["bankList"]} >= {"BPI", "BDO", "Unionbank"}
    assert page["props"]["employeesCount"] == 2


@pytest.mark.asyncio
async def test_excel_and_fixed_width_formats(
    client: AsyncClient, officer_headers: dict, approved_period: dict
) -> None:
    period_id = approved_period["period"]["id"]
    excel = (await _generate(client, officer_headers, period_id, fmt="excel")).json()
    assert excel["file"]["file_name"].endswith(".xlsx")
    response = await client.get(excel["download_url"], headers=officer_headers)
    workbook = load_workbook(io.BytesIO(response.content))
    sheet = workbook["Payroll"]
    assert sheet["A1"].value == "Account Number"
    assert sheet["D2"].value == 17500.0

    fixed = (await _generate(client, officer_headers, period_id, bank="Metrobank", fmt="fixed_width")).json()
    response = await client.get(fixed["download_url"], headers=officer_headers)
    lines = response.text.splitlines()
    assert all(len(line) == 86 for line in lines[:2])
    assert lines[-1].startswith("T")
    assert lines[-1].endswith("35000.00")


@pytest.mark.asyncio
async def test_validate_and_upload(
    client: AsyncClient, officer_headers: dict, approved_period: dict
) -> None:
    period_id = approved_period["period"]["id"]
    bank_file = (await _generate(client, officer_headers, period_id, bank="BPI")).json()["file"]

    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/validate", headers=officer_headers)
    report = response.json()
    assert report["success"] is True
    assert report["status"] == "validated"
    assert report["valid_records"] == 2
    assert report["warning_count"] == 2
    assert report["error_count"] == 0

    response = await client.post(
        f"/payroll/bank-files/{bank_file['id']}/upload",
        json={"confirmation_method": "auto"},
        headers=officer_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["confirmation_number"] == f"BF-{bank_file['id']:08d}"
    assert body["file"]["status"] == "uploaded"
    assert body["file"]["confirmation_method"] == "auto"

    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/upload", headers=officer_headers)
    assert response.status_code == 409
    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/regenerate", headers=officer_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_invalid_accounts_fail_validation(
    client: AsyncClient, manager_headers: dict, make_employee, make_period
) -> None:
    from conftest import result_row

    good = await make_employee(full_name="Ana Garcia")
    bad = await make_employee(full_name="Pedro Reyes", bank_account_number="12-34")
    period = await make_period()
    calculation = (
        await client.post(
            "/payroll/calculations", json={"payroll_period_id": period["id"]}, headers=manager_headers
        )
    ).json()["calculation"]
    await client.post(
        f"/payroll/calculations/{calculation['id']}/results",
        json={"results": [result_row(good["id"]), result_row(bad["id"])]},
        headers=manager_headers,
    )
    for action in ("review", "approve"):
        await client.post(f"/payroll/periods/{period['id']}/{action}", headers=manager_headers)

    bank_file = (await _generate(client, manager_headers, period["id"])).json()["file"]
    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/validate", headers=manager_headers)
    report = response.json()
    assert report["success"] is False
    assert report["status"] == "failed"
    assert report["valid_records"] == 1
    assert report["errors"][0]["employee_name"] == "Pedro Reyes"
    assert report["errors"][0]["message"] == "Bank account number must contain digits only"

    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/upload", headers=manager_headers)
    assert response.status_code == 409

    response = await client.post(f"/payroll/bank-files/{bank_file['id']}/regenerate", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["file"]["status"] == "generated"
