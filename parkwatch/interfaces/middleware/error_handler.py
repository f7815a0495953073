from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from parkwatch.application.errors import AppError, StorageError, ValidationError

logger = logging.getLogger(__name__)


def _payload(code: str, message: str, details=None) -> dict:
    payload = {"success": False, "code": code, "error": message}
    if details is not None:
        payload["details"] = details
    return payload


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:  # noqa: WPS430
        if isinstance(exc, StorageError):
            logger.error(
                "Storage error: %s",
                exc.message,
                exc_info=exc.__cause__,
                extra={"path": request.url.path, "method": request.method},
            )
        else:
            logger.info(
                "Application error handled: %s - %s (status: %d)",
                exc.code,
                exc.message,
                exc.status_code,
                extra={"path": request.url.path, "method": request.method},
            )
        return JSONResponse(
            status_code=exc.status_code, content=_payload(exc.code, exc.message, exc.details)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(  # noqa: WPS430
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError("Malformed request")
        return JSONResponse(
            status_code=error.status_code,
            content=_payload(error.code, error.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=exc.status_code, content=_payload("http_error", exc.detail)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:  # noqa: WPS430
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        error = StorageError("Unexpected server error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_payload(error.code, error.message),
        )
