"""Bank file endpoints."""
from fastapi import APIRouter, Depends, Request, Response

from ..dependencies import service_dependency
from ..presenters.inertia import render_page
from ..schemas.bank_files import BankFileGenerate, BankFileUpload
from ..services.bank_files import BankFileService, bank_file_props

router = APIRouter(prefix="/payroll/bank-files", tags=["bank files"])
get_service = service_dependency(BankFileService)


@router.get("")
async def index(request: Request, service: BankFileService = Depends(get_service)):
    return render_page(request, "Payroll/Payments/BankFiles/Index", await service.index_props())


@router.post("/generate")
async def generate(payload: BankFileGenerate, service: BankFileService = Depends(get_service)) -> dict:
    bank_file = await service.generate(payload)
    props = bank_file_props(bank_file)
    return {
        "success": True,
        "message": f"{payload.bank_name} bank file generated for {bank_file.total_employees} employee(s)",
        "file": props,
        "download_url": props["download_url"],
    }


@router.post("/{bank_file_id}/validate")
async def validate(bank_file_id: int, service: BankFileService = Depends(get_service)) -> dict:
    return await service.validate(bank_file_id)


@router.post("/{bank_file_id}/upload")
async def upload(
    bank_file_id: int,
    payload: BankFileUpload | None = None,
    service: BankFileService = Depends(get_service),
) -> dict:
    bank_file = await service.upload(bank_file_id, payload or BankFileUpload())
    return {
        "success": True,
        "message": "Bank file marked as uploaded",
        "confirmation_number": bank_file.confirmation_number,
        "file": bank_file_props(bank_file),
    }


@router.get("/{bank_file_id}/download")
async def download(bank_file_id: int, service: BankFileService = Depends(get_service)) -> Response:
    bank_file = await service.get(bank_file_id)
    return Response(
        content=bank_file.content,
        media_type=service.media_type(bank_file),
        headers={"Content-Disposition": f'attachment; filename="{bank_file.file_name}"'},
    )


@router.post("/{bank_file_id}/regenerate")
async def regenerate(bank_file_id: int, service: BankFileService = Depends(get_service)) -> dict:
    bank_file = await service.regenerate(bank_file_id)
    props = bank_file_props(bank_file)
    return {
        "success": True,
        "message": "Bank file regenerated",
        "file": props,
        "download_url": props["download_url"],
    }
