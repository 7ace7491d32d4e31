"""Payroll dashboard endpoint."""
from fastapi import APIRouter, Depends, Request

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..services.dashboard import DashboardService

router = APIRouter(prefix="/payroll", tags=["payroll dashboard"])


@router.get("/dashboard")
async def dashboard(
    request: Request,
    service: DashboardService = Depends(service_dependency(DashboardService)),
):
    """Current period, headcount, net payroll trend, pending work and alerts."""

    return render_page(request, "Payroll/Dashboard", await service.props())
