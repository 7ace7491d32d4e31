"""Payroll period endpoints."""
from fastapi import APIRouter, Depends, Request, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.periods import PeriodPayload, PeriodReject
from ..services.periods import PeriodService, period_props

router = APIRouter(prefix="/payroll/periods", tags=["payroll periods"])
get_service = service_dependency(PeriodService)


@router.get("")
async def index(
    request: Request,
    status: str | None = None,
    period_type: str | None = None,
    search: str | None = None,
    year: int | None = None,
    service: PeriodService = Depends(get_service),
):
    """List payroll periods with their progress and available actions."""

    props = await service.index_props(status=status, period_type=period_type, search=search, year=year)
    return render_page(request, "Payroll/PayrollProcessing/Periods/Index", props)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create(payload: PeriodPayload, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.create(payload)
    return {"success": True, "message": "Payroll period created successfully", "period": period_props(period)}


@router.get("/{period_id}")
async def show(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    return await service.show_props(period_id)


@router.put("/{period_id}")
async def update(period_id: int, payload: PeriodPayload, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.update(period_id, payload)
    return {"success": True, "message": "Payroll period updated successfully", "period": period_props(period)}


@router.delete("/{period_id}")
async def destroy(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    await service.delete(period_id)
    return {"success": True, "message": "Payroll period deleted successfully"}


@router.post("/{period_id}/review")
async def review(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.transition(period_id, "review")
    return {"success": True, "message": "Payroll period moved to review", "period": period_props(period)}


@router.post("/{period_id}/approve")
async def approve(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.transition(period_id, "approve")
    return {"success": True, "message": "Payroll period approved", "period": period_props(period)}


@router.post("/{period_id}/reject")
async def reject(
    period_id: int, payload: PeriodReject, service: PeriodService = Depends(get_service)
) -> dict:
    period = await service.transition(period_id, "reject", reason=payload.reason)
    return {"success": True, "message": "Payroll period sent back for recalculation", "period": period_props(period)}


@router.post("/{period_id}/mark-paid")
async def mark_paid(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.transition(period_id, "mark_paid")
    return {"success": True, "message": "Payroll period marked as paid", "period": period_props(period)}


@router.post("/{period_id}/close")
async def close(period_id: int, service: PeriodService = Depends(get_service)) -> dict:
    period = await service.transition(period_id, "close")
    return {"success": True, "message": "Payroll period closed", "period": period_props(period)}
