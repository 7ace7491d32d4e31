"""Cash advance endpoints."""
from fastapi import APIRouter, Depends, Request, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.advances import AdvanceApprove, AdvanceCreate, AdvanceReject, DeductionRecord
from ..services.advances import AdvanceService, advance_props

router = APIRouter(prefix="/payroll/advances", tags=["cash advances"])
get_service = service_dependency(AdvanceService)


@router.get("")
async def index(
    request: Request,
    approval_status: str | None = None,
    deduction_status: str | None = None,
    employee_id: int | None = None,
    department: str | None = None,
    search: str | None = None,
    service: AdvanceService = Depends(get_service),
):
    props = await service.index_props(
        approval_status=approval_status,
        deduction_status=deduction_status,
        employee_id=employee_id,
        department=department,
        search=search,
    )
    return render_page(request, "Payroll/Advances/Index", props)


@router.get("/create")
async def create_form(service: AdvanceService = Depends(get_service)) -> dict:
    """Options for the advance request form."""

    return await service.form_options()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create(payload: AdvanceCreate, service: AdvanceService = Depends(get_service)) -> dict:
    advance = await service.create(payload)
    return {"success": True, "message": "Cash advance request submitted", "advance": advance_props(advance)}


@router.post("/{advance_id}/approve")
async def approve(
    advance_id: int, payload: AdvanceApprove, service: AdvanceService = Depends(get_service)
) -> dict:
    advance = await service.approve(advance_id, payload)
    return {"success": True, "message": "Cash advance approved", "advance": advance_props(advance)}


@router.post("/{advance_id}/reject")
async def reject(
    advance_id: int, payload: AdvanceReject, service: AdvanceService = Depends(get_service)
) -> dict:
    advance = await service.reject(advance_id, payload)
    return {"success": True, "message": "Cash advance rejected", "advance": advance_props(advance)}


@router.get("/{advance_id}/deductions")
async def deductions(advance_id: int, service: AdvanceService = Depends(get_service)) -> dict:
    return await service.deductions_props(advance_id)


@router.post("/{advance_id}/deductions")
async def record_deduction(
    advance_id: int,
    payload: DeductionRecord | None = None,
    service: AdvanceService = Depends(get_service),
) -> dict:
    advance = await service.record_deduction(advance_id, payload or DeductionRecord())
    return {"success": True, "message": "Deduction recorded", "advance": advance_props(advance)}


@router.post("/{advance_id}/early-repayment")
async def early_repayment(
    advance_id: int,
    payload: DeductionRecord | None = None,
    service: AdvanceService = Depends(get_service),
) -> dict:
    advance = await service.early_repayment(advance_id, payload or DeductionRecord())
    return {"success": True, "message": "Cash advance fully repaid", "advance": advance_props(advance)}
