"""Tenant-scoped WebSocket fan-out for payroll progress events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)

PAYROLL_CHANNEL = "payroll"
PAYROLL_EVENTS = frozenset(
    {
        "payroll.calculation.started",
        "payroll.calculation.progress",
        "payroll.calculation.completed",
        "payroll.bank_file.generated",
    }
)


class WebSocketManager:
    """Keeps the open sockets of each tenant so events never cross accounts."""

    def __init__(self) -> None:
        self._connections: Dict[str, List[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, tenant_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections.setdefault(tenant_id, []).append(websocket)
        logger.debug("WebSocket joined %s (%s open)", tenant_id, self.subscriber_count(tenant_id))

    async def disconnect(self, tenant_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(tenant_id)
            if not sockets:
                return
            if websocket in sockets:
                sockets.remove(websocket)
            if not sockets:
                del self._connections[tenant_id]

    def subscriber_count(self, tenant_id: str) -> int:
        return len(self._connections.get(tenant_id, []))

    async def broadcast(self, tenant_id: str, payload: Dict[str, Any]) -> int:
        """Send ``payload`` to every socket of ``tenant_id``; return how many received it."""

        async with self._lock:
            targets = list(self._connections.get(tenant_id, []))

        delivered = 0
        stale: List[WebSocket] = []
        for connection in targets:
            try:
                await connection.send_json(payload)
                delivered += 1
            except Exception as exc:  # pragma: no cover - socket closed mid-send
                logger.info("Dropping stale WebSocket for %s: %s", tenant_id, exc)
                stale.append(connection)

        for websocket in stale:
            await self.disconnect(tenant_id, websocket)
        return delivered


ws_manager = WebSocketManager()


async def broadcast_event(tenant_id: str, channel: str, action: str, data: Dict[str, Any]) -> int:
    return await ws_manager.broadcast(tenant_id, {"channel": channel, "action": action, "data": data})


async def broadcast_payroll_event(tenant_id: str, action: str, data: Dict[str, Any]) -> int:
    """Publish a lifecycle event such as ``payroll.calculation.completed``."""

    if action not in PAYROLL_EVENTS:
        raise ValueError(f"Unknown payroll event: {action}")
    return await broadcast_event(tenant_id, PAYROLL_CHANNEL, action, data)
