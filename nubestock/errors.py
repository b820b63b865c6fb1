"""Structured errors and exception handlers for API responses."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from nubestock.utils.formatting import utc_now_iso

logger = logging.getLogger(__name__)


def build_error_payload(message: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        payload["errors"] = errors
    payload["timestamp"] = utc_now_iso()
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors

    @property
    def payload(self) -> Dict[str, Any]:
        return build_error_payload(self.message, self.errors)


class NotFoundError(AppError):
    def __init__(self, message: str):
        super().__init__(404, message)


class ConflictError(AppError):
    """Natural-key collision on single-record writes (reported as 400)."""

    def __init__(self, message: str):
        super().__init__(400, message)


class BulkPayloadError(AppError):
    """Bulk request body that cannot be normalized into a list of records."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(400, message, errors)


class StorePhase(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    TRANSACTION = "TRANSACTION"


def describe_cause(cause: BaseException | str) -> str:
    if isinstance(cause, str):
        return cause
    if isinstance(cause, DBAPIError) and cause.orig is not None:
        return str(cause.orig).strip() or type(cause.orig).__name__
    return str(cause).strip() or type(cause).__name__


class StoreError(Exception):
    """A store operation that failed, tagged with the phase it failed in."""

    def __init__(self, phase: StorePhase, cause: BaseException | str):
        self.phase = phase
        self.cause = cause
        super().__init__(f"{phase.value} Error: {describe_cause(cause)}")


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def request_validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=build_error_payload("Invalid input data", errors))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=build_error_payload("Internal server error"))
