"""Payroll adjustment endpoints."""
from fastapi import APIRouter, Depends, Request, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.adjustments import AdjustmentPayload, AdjustmentReject
from ..services.adjustments import AdjustmentService, adjustment_props

router = APIRouter(prefix="/payroll/adjustments", tags=["payroll adjustments"])
get_service = service_dependency(AdjustmentService)


@router.get("")
async def index(
    request: Request,
    period_id: int | None = None,
    employee_id: int | None = None,
    status: str | None = None,
    adjustment_type: str | None = None,
    search: str | None = None,
    service: AdjustmentService = Depends(get_service),
):
    props = await service.index_props(
        period_id=period_id,
        employee_id=employee_id,
        status=status,
        adjustment_type=adjustment_type,
        search=search,
    )
    return render_page(request, "Payroll/PayrollProcessing/Adjustments/Index", props)


@router.get("/history")
async def history(
    request: Request,
    period_id: int | None = None,
    service: AdjustmentService = Depends(get_service),
):
    props = await service.history_props(period_id=period_id)
    return render_page(request, "Payroll/PayrollProcessing/Adjustments/History", props)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create(payload: AdjustmentPayload, service: AdjustmentService = Depends(get_service)) -> dict:
    adjustment = await service.create(payload)
    return {
        "success": True,
        "message": "Adjustment submitted for approval",
        "adjustment": adjustment_props(adjustment),
    }


@router.put("/{adjustment_id}")
async def update(
    adjustment_id: int, payload: AdjustmentPayload, service: AdjustmentService = Depends(get_service)
) -> dict:
    adjustment = await service.update(adjustment_id, payload)
    return {"success": True, "message": "Adjustment updated", "adjustment": adjustment_props(adjustment)}


@router.delete("/{adjustment_id}")
async def destroy(adjustment_id: int, service: AdjustmentService = Depends(get_service)) -> dict:
    await service.delete(adjustment_id)
    return {"success": True, "message": "Adjustment deleted"}


@router.post("/{adjustment_id}/approve")
async def approve(adjustment_id: int, service: AdjustmentService = Depends(get_service)) -> dict:
    adjustment = await service.review(adjustment_id, approve=True)
    return {"success": True, "message": "Adjustment approved", "adjustment": adjustment_props(adjustment)}


@router.post("/{adjustment_id}/reject")
async def reject(
    adjustment_id: int, payload: AdjustmentReject, service: AdjustmentService = Depends(get_service)
) -> dict:
    adjustment = await service.review(adjustment_id, approve=False, rejection_notes=payload.rejection_notes)
    return {"success": True, "message": "Adjustment rejected", "adjustment": adjustment_props(adjustment)}
