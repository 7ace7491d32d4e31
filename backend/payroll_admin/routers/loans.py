"""Employee loan endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Query, Request, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.loans import LoanCancel, LoanCreate, LoanPaymentCreate
from ..services.loans import LoanService, loan_props

router = APIRouter(prefix="/payroll/loans", tags=["employee loans"])
get_service = service_dependency(LoanService)


@router.get("")
async def index(
    request: Request,
    loan_type: List[str] | None = Query(default=None),
    status: List[str] | None = Query(default=None),
    employee_id: int | None = None,
    department: str | None = None,
    search: str | None = None,
    service: LoanService = Depends(get_service),
):
    props = await service.index_props(
        loan_type=loan_type,
        status=status,
        employee_id=employee_id,
        department=department,
        search=search,
    )
    return render_page(request, "Payroll/EmployeePayroll/Loans/Index", props)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create(payload: LoanCreate, service: LoanService = Depends(get_service)) -> dict:
    loan = await service.create(payload)
    return {"success": True, "message": "Loan created successfully", "loan": loan_props(loan)}


@router.get("/{loan_id}")
async def show(loan_id: int, service: LoanService = Depends(get_service)) -> dict:
    return await service.show_props(loan_id)


@router.post("/{loan_id}/payments")
async def record_payment(
    loan_id: int,
    payload: LoanPaymentCreate | None = None,
    service: LoanService = Depends(get_service),
) -> dict:
    loan = await service.record_payment(loan_id, payload or LoanPaymentCreate())
    return {"success": True, "message": "Loan payment recorded", "loan": loan_props(loan)}


@router.post("/{loan_id}/cancel")
async def cancel(loan_id: int, payload: LoanCancel, service: LoanService = Depends(get_service)) -> dict:
    loan = await service.cancel(loan_id, payload)
    return {"success": True, "message": "Loan cancelled", "loan": loan_props(loan)}
