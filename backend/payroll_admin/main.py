"""FastAPI application entry point."""
import logging

import jwt
from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status

from .auth import router as auth_router
from .config import get_settings
from .database import create_all_tables
from .dependencies import decode_access_token
from .exceptions import register_exception_handlers
from .logging_config import configure_logging
from .routers.adjustments import router as adjustments_router
from .routers.advances import router as advances_router
from .routers.bank_files import router as bank_files_router
from .routers.calculations import router as calculations_router
from .routers.dashboard import router as dashboard_router
from .routers.employees import router as employees_router
from .routers.loans import router as loans_router
from .routers.periods import router as periods_router
from .routers.reports import router as reports_router
from .routers.sss import router as sss_router
from .websocket_manager import ws_manager

logger = logging.getLogger(__name__)

configure_logging(get_settings().log_level)

app = FastAPI(title="Payroll Admin Backend", version="0.1.0")
register_exception_handlers(app)
app.include_router(auth_router)
app.include_router(employees_router)
app.include_router(dashboard_router)
app.include_router(periods_router)
app.include_router(calculations_router)
app.include_router(adjustments_router)
app.include_router(advances_router)
app.include_router(loans_router)
app.include_router(bank_files_router)
app.include_router(sss_router)
app.include_router(reports_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Ensure database tables exist."""

    await create_all_tables()
    logger.info("Payroll Admin backend started")


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple readiness probe for uptime checks."""

    return {"status": "ok"}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: str) -> None:
    """Authenticate clients and keep a tenant-scoped connection open."""

    try:
        token_data = decode_access_token(token)
    except jwt.PyJWTError:
        await websocket.close(
            code=status.WS_1008_POLICY_VIOLATION,
            reason="Invalid or expired token",
        )
        return

    tenant_id = token_data.account_id
    await ws_manager.connect(tenant_id, websocket)
    try:
        while True:
            # Keep the connection alive and listen for optional client pings
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await ws_manager.disconnect(tenant_id, websocket)
