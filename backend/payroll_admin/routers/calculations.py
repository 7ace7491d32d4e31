"""Calculation run endpoints."""
from fastapi import APIRouter, Depends, Request, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.calculations import CalculationResults, CalculationStart
from ..services.calculations import CalculationService, calculation_props

router = APIRouter(prefix="/payroll/calculations", tags=["payroll calculations"])
get_service = service_dependency(CalculationService)


@router.get("")
async def index(
    request: Request,
    period_id: int | None = None,
    status: str | None = None,
    calculation_type: str | None = None,
    service: CalculationService = Depends(get_service),
):
    props = await service.index_props(period_id=period_id, status=status, calculation_type=calculation_type)
    return render_page(request, "Payroll/PayrollProcessing/Calculations/Index", props)


@router.post("", status_code=status.HTTP_201_CREATED)
async def start(payload: CalculationStart, service: CalculationService = Depends(get_service)) -> dict:
    calculation = await service.start(payload)
    return {
        "success": True,
        "message": "Payroll calculation started",
        "calculation": calculation_props(calculation),
    }


@router.get("/{calculation_id}")
async def show(calculation_id: int, service: CalculationService = Depends(get_service)) -> dict:
    return await service.show_props(calculation_id)


@router.post("/{calculation_id}/results")
async def ingest_results(
    calculation_id: int,
    payload: CalculationResults,
    service: CalculationService = Depends(get_service),
) -> dict:
    """Accept per-employee figures computed by the external engine."""

    calculation = await service.ingest_results(calculation_id, payload)
    return {
        "success": True,
        "message": f"Stored results for {len(payload.results)} employee(s)",
        "calculation": calculation_props(calculation),
    }


@router.post("/{calculation_id}/recalculate")
async def recalculate(calculation_id: int, service: CalculationService = Depends(get_service)) -> dict:
    calculation = await service.recalculate(calculation_id)
    return {"success": True, "message": "Recalculation started", "calculation": calculation_props(calculation)}


@router.post("/{calculation_id}/approve")
async def approve(calculation_id: int, service: CalculationService = Depends(get_service)) -> dict:
    calculation = await service.approve(calculation_id)
    return {"success": True, "message": "Calculation approved", "calculation": calculation_props(calculation)}


@router.delete("/{calculation_id}")
async def destroy(calculation_id: int, service: CalculationService = Depends(get_service)) -> dict:
    await service.delete(calculation_id)
    return {"success": True, "message": "Calculation deleted"}
