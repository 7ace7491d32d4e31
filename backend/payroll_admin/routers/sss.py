"""SSS contribution and R3 report endpoints."""
from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.sss import ContributionImport, R3Generate, R3Submit
from ..services.sss import SSSService, report_props

router = APIRouter(prefix="/payroll/government/sss", tags=["sss"])
get_service = service_dependency(SSSService)


def _csv_download(content: str, file_name: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("")
async def index(
    request: Request,
    period_id: int | None = None,
    month: str | None = None,
    search: str | None = None,
    service: SSSService = Depends(get_service),
):
    props = await service.index_props(period_id=period_id, month=month, search=search)
    return render_page(request, "Payroll/Government/SSS/Index", props)


@router.post("/contributions", status_code=status.HTTP_201_CREATED)
async def import_contributions(
    payload: ContributionImport, service: SSSService = Depends(get_service)
) -> dict:
    imported = await service.import_contributions(payload)
    return {"success": True, "message": f"Imported {imported} contribution row(s)", "imported": imported}


@router.get("/contributions/{period_id}/download")
async def download_contributions(period_id: int, service: SSSService = Depends(get_service)) -> Response:
    file_name, content = await service.contribution_summary(period_id)
    return _csv_download(content, file_name)


@router.post("/r3/{period_id}", status_code=status.HTTP_201_CREATED)
async def generate_r3(
    period_id: int, payload: R3Generate, service: SSSService = Depends(get_service)
) -> dict:
    report = await service.generate_r3(period_id, payload.month)
    return {"success": True, "message": "SSS R3 report generated successfully", "report": report_props(report)}


@router.get("/r3/{report_id}/download")
async def download_r3(report_id: int, service: SSSService = Depends(get_service)) -> Response:
    report = await service.get_report(report_id)
    return _csv_download(report.content, report.file_name)


@router.post("/r3/{report_id}/submit")
async def submit_r3(
    report_id: int,
    payload: R3Submit | None = None,
    service: SSSService = Depends(get_service),
) -> dict:
    report = await service.submit(report_id, payload or R3Submit())
    return {"success": True, "message": "SSS R3 report submitted successfully", "report": report_props(report)}
