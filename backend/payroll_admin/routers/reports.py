"""Payroll report endpoints."""
from datetime import date

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user, get_db_session
from ..models import User
from ..presenters.inertia import render_page
from ..services.audit import audit_report_props

router = APIRouter(prefix="/payroll/reports", tags=["payroll reports"])


@router.get("/audit")
async def audit(
    request: Request,
    action: str | None = None,
    entity_type: str | None = None,
    user_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Audit trail of payroll changes, newest first."""

    props = await audit_report_props(
        session,
        current_user.account_id,
        action=action,
        entity_type=entity_type,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return render_page(request, "Payroll/Reports/Audit", props)
