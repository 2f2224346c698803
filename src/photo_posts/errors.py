from __future__ import annotations

from enum import Enum

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    OPERATION_FAILED = "operation_failed"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.OPERATION_FAILED: 500,
}

REQUIRED_FIELDS_MESSAGE = "Caption and image_url are required"
NOT_FOUND_MESSAGE = "Post not found"
INTERNAL_ERROR_MESSAGE = "Internal server error"

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


def error_response(kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES[kind],
        content={"success": False, "error": message},
    )


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.kind, exc.message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed or wrongly typed bodies are reported like missing fields.
    return error_response(ErrorKind.VALIDATION, REQUIRED_FIELDS_MESSAGE)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path)
    return error_response(ErrorKind.OPERATION_FAILED, INTERNAL_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
