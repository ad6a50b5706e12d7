from __future__ import annotations

import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from extractly.config import Settings
from extractly.errors import AppError
from extractly.logger import get_logger

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.error("Error %d: %s (%s %s)", exc.status_code, exc.message, request.method, request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        messages = [err.get("msg", "invalid value") for err in exc.errors()]
        return JSONResponse(
            status_code=400, content={"error": f"Validation failed: {', '.join(messages)}"}
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "path": request.url.path,
                    "method": request.method,
                },
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) or "Internal Server Error"
        if settings.is_production:
            return JSONResponse(status_code=500, content={"error": message})
        return JSONResponse(
            status_code=500,
            content={
                "error": message,
                "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
                "path": request.url.path,
                "method": request.method,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
