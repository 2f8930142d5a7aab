# app/core/errors.py
from __future__ import annotations
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.v1.schemas.product import ApiError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures the API maps to a structured ApiError body."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateResourceError(AppError):
    """A resource with the same natural key already exists."""

    def __init__(self, key: str, resource: str = "Product", key_label: str = "QR Code ID"):
        super().__init__(f"{resource} with {key_label} {key} already exists.")
        self.resource = resource
        self.key = key


class StorageError(AppError):
    """Any persistence failure other than a uniqueness violation."""


# Failure kind -> HTTP status. Subclasses resolve through their MRO.
ERROR_STATUS: dict[type[AppError], int] = {
    DuplicateResourceError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: AppError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(request: Request, message: str, code: int) -> JSONResponse:
    body = ApiError(
        path=request.url.path,
        message=message,
        status=code,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=code, content=body.model_dump(mode="json"))


def _format_validation_errors(exc: RequestValidationError) -> str:
    # e.g. "body.qrCodeId: String should have at least 1 character"
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({code}): {exc.message}")
    return _error_response(request, exc.message, code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.info(f"{request.method} {request.url.path} invalid request: {message}")
    return _error_response(request, message, status.HTTP_400_BAD_REQUEST)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
