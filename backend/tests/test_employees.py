"""Integration tests for the employee API."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_login_and_employee_flow(client: AsyncClient) -> None:
    """A user can register, log in, create an employee, and list employees."""

    register_payload = {
        "username": "owner",
        "password": "secret123",
        "account_id": "acme",
        "email": "owner@example.com",
    }
    response = await client.post("/auth/register", json=register_payload)
    assert response.status_code == 201
    user_data = response.json()
    assert user_data["username"] == "owner"
    assert user_data["role"] == "payroll_officer"

    login_response = await client.post("/auth/login", json=register_payload)
    assert login_response.status_code == 200
    token = login_response.json()["access_token"]

    employee_payload = {
        "code": "E-001",
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "contact_number": "+123456789",
        "position": "Engineer",
        "department": "R&D",
        "basic_salary": 5000.0,
        "bank_name": "BPI",
        "bank_account_number": "1234567890",
    }
    create_response = await client.post(
        "/employees/", json=employee_payload, headers={"Authorization": f"Bearer {token}"}
    )
    assert create_response.status_code == 201
    employee_data = create_response.json()
    assert employee_data["code"] == "E-001"
    assert employee_data["employment_status"] == "active"

    list_response = await client.get("/employees/", headers={"Authorization": f"Bearer {token}"})
    assert list_response.status_code == 200
    employees = list_response.json()
    assert len(employees) == 1
    assert employees[0]["full_name"] == "Ada Lovelace"
    assert employees[0]["bank_account_number"] == "1234567890"


@pytest.mark.asyncio
async def test_duplicate_employee_code_conflicts(client: AsyncClient, make_employee, manager_headers) -> None:
    await make_employee(code="E-100")
    response = await client.post(
        "/employees/", json={"code": "E-100", "full_name": "Someone Else"}, headers=manager_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_endpoints_require_a_token(client: AsyncClient) -> None:
    assert (await client.get("/employees/")).status_code == 401
    assert (await client.get("/payroll/periods")).status_code == 401
    bad = await client.get("/payroll/dashboard", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(client: AsyncClient) -> None:
    credentials = {"username": "pat", "password": "secret123", "account_id": "acme"}
    await client.post("/auth/register", json=credentials)
    response = await client.post("/auth/login", json={**credentials, "password": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_employees_are_scoped_to_tenant(client: AsyncClient, make_employee) -> None:
    from conftest import login_headers

    await make_employee()
    other = await login_headers(client, "outsider", "admin", account_id="globex")
    response = await client.get("/employees/", headers=other)
    assert response.status_code == 200
    assert response.json() == []
