"""
HTTP error handling.

Endpoints translate service exceptions into ApiError; the
handlers registered in main.py render ApiError and request
validation failures in the shared error envelope.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from banking_service.schemas.error import ErrorBody, ErrorResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error with an HTTP status and a machine-readable code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Any = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


def error_response(
    status_code: int, code: str, message: str, details: Any = None
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(code=code, message=message, details=details)
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s (%s)",
            request.method, request.url.path, exc.code, exc.details,
        )
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed requests as 400 VALIDATION_ERROR."""
    details = [
        {
            "field": ".".join(
                str(part) for part in error["loc"] if part != "body"
            ),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(
        400, "VALIDATION_ERROR", "Invalid request data", details
    )
