"""Test fixtures for the backend."""
import itertools
import os
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_backend.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from payroll_admin import models  # noqa: E402
from payroll_admin.database import engine  # noqa: E402
from payroll_admin.main import app  # noqa: E402


test_db_path = Path("test_backend.db")


@pytest_asyncio.fixture
async def database() -> None:
    """Create the database schema before each test and drop it afterwards."""

    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.drop_all)
    if test_db_path.exists():
        test_db_path.unlink()


@pytest_asyncio.fixture
async def client(database) -> AsyncClient:
    """Provide an HTTP client for integration tests."""

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


async def login_headers(
    client: AsyncClient, username: str, role: str, account_id: str = "acme"
) -> dict:
    credentials = {
        "username": username,
        "password": "secret123",
        "account_id": account_id,
        "full_name": username.title(),
        "role": role,
    }
    response = await client.post("/auth/register", json=credentials)
    assert response.status_code == 201, response.text
    response = await client.post("/auth/login", json=credentials)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def manager_headers(client: AsyncClient) -> dict:
    """Headers for a payroll manager, who may approve and reject."""

    return await login_headers(client, "manager", "payroll_manager")


@pytest_asyncio.fixture
async def officer_headers(client: AsyncClient) -> dict:
    """Headers for a payroll officer, who may not approve."""

    return await login_headers(client, "officer", "payroll_officer")


@pytest_asyncio.fixture
async def make_employee(client: AsyncClient, manager_headers: dict):
    counter = itertools.count(1)

    async def _make(**overrides) -> dict:
        number = next(counter)
        payload = {
            "code": f"E-{number:03d}",
            "full_name": f"Employee {number:03d}",
            "department": "Operations",
            "position": "Operator",
            "basic_salary": 25000.0,
            "sss_number": f"34-000000{number}-1",
            "bank_name": "BDO",
            "bank_account_number": f"{number:012d}",
            **overrides,
        }
        response = await client.post("/employees/", json=payload, headers=manager_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest_asyncio.fixture
async def make_period(client: AsyncClient, manager_headers: dict):
    async def _make(**overrides) -> dict:
        payload = {
            "name": "November 1-15, 2025",
            "period_type": "semi_monthly",
            "start_date": "2025-11-01",
            "end_date": "2025-11-15",
            "cutoff_date": "2025-11-13",
            "pay_date": "2025-11-20",
            **overrides,
        }
        response = await client.post("/payroll/periods", json=payload, headers=manager_headers)
        assert response.status_code == 201, response.text
        return response.json()["period"]

    return _make


def result_row(employee_id: int, gross: float = 20000.0, deductions: float = 2500.0, **overrides) -> dict:
    """Engine output for one employee whose net pay reconciles."""

    row = {
        "employee_id": employee_id,
        "basic_salary": gross,
        "gross_pay": gross,
        "sss_contribution": 1000.0,
        "philhealth_contribution": 500.0,
        "pagibig_contribution": 200.0,
        "withholding_tax": deductions - 1700.0,
        "total_deductions": deductions,
        "net_pay": gross - deductions,
        "employer_contribution": 1500.0,
    }
    row.update(overrides)
    return row


@pytest_asyncio.fixture
async def calculated_period(client: AsyncClient, manager_headers: dict, make_employee, make_period):
    """A period whose calculation run completed for two employees."""

    employees = [
        await make_employee(full_name="Juan Dela Cruz"),
        await make_employee(full_name="Maria Santos"),
    ]
    period = await make_period()
    response = await client.post(
        "/payroll/calculations",
        json={"payroll_period_id": period["id"], "calculation_type": "regular"},
        headers=manager_headers,
    )
    assert response.status_code == 201, response.text
    calculation = response.json()["calculation"]
    response = await client.post(
        f"/payroll/calculations/{calculation['id']}/results",
        json={"results": [result_row(e["id"]) for e in employees]},
        headers=manager_headers,
    )
    assert response.status_code == 200, response.text
    return {"period": period, "calculation": response.json()["calculation"], "employees": employees}


@pytest_asyncio.fixture
async def approved_period(client: AsyncClient, manager_headers: dict, calculated_period: dict):
    period_id = calculated_period["period"]["id"]
    for action in ("review", "approve"):
        response = await client.post(f"/payroll/periods/{period_id}/{action}", headers=manager_headers)
        assert response.status_code == 200, response.text
    return calculated_period
