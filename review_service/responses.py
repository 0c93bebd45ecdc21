"""Response envelope and exception handlers shared by all routers.

Every JSON response has the shape ``{"success": bool, "data" | "error": ...,
"meta"?: {...}}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from review_service.store import StorageError

logger = logging.getLogger(__name__)

VALIDATION_FAILED = "Validation failed"
INTERNAL_ERROR = "Internal server error"


class RequestValidationFailed(Exception):
    """Client payload or parameters failed validation (HTTP 400)."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def success(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "data": data}
    if meta is not None:
        body["meta"] = meta
    return body


def failure(status_code: int, error: str, details: Optional[List[str]] = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _describe_request_error(error: Dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("query", "path", "body")]
    name = ".".join(loc) or "request"
    return f"{name}: {error.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error path through the common envelope."""

    @app.exception_handler(RequestValidationFailed)
    async def validation_failed(request: Request, exc: RequestValidationFailed):
        return failure(400, VALIDATION_FAILED, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return failure(400, VALIDATION_FAILED, [_describe_request_error(e) for e in exc.errors()])

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return failure(404, "Endpoint not found")
        return failure(exc.status_code, str(exc.detail))

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return failure(500, INTERNAL_ERROR)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(
            "Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return failure(500, INTERNAL_ERROR)
