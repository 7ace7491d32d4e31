"""Payroll error types and the FastAPI handlers that render them."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PayrollError(Exception):
    """Base exception for payroll operations."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or {}


class PayrollValidationError(PayrollError):
    """Input that passed schema validation but breaks a business rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            errors={field: message} if field else None,
        )


class NotFoundError(PayrollError):
    """Resource not found in the caller's tenant."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} with identifier {identifier} not found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class InvalidStateError(PayrollError):
    """The record's current status does not allow the requested action."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class PermissionDeniedError(PayrollError):
    """The current user's role may not perform the action."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return parts[-1] if parts else "request"


def _error_message(error: dict) -> str:
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return str(error.get("msg", "Invalid value"))


async def handle_payroll_error(request: Request, exc: PayrollError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Payroll error on %s: %s", request.url.path, exc.message)
    else:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "errors": exc.errors},
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), _error_message(error))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "The given data was invalid.",
            "errors": errors,
        },
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Something went wrong. Please try again."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all payroll exception handlers with the FastAPI app."""

    app.add_exception_handler(PayrollError, handle_payroll_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
