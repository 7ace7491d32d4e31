"""Inertia page objects returned by the listing endpoints."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..config import get_settings


def render_page(request: Request, component: str, props: Dict[str, Any]) -> JSONResponse:
    """Build the ``{component, props, url, version}`` body for ``component``."""

    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    page = {
        "component": component,
        "props": jsonable_encoder(props),
        "url": url,
        "version": get_settings().asset_version,
    }
    return JSONResponse(content=page, headers={"X-Inertia": "true", "Vary": "X-Inertia"})
