"""Central error translator.

Every error leaves the API in the same envelope, whichever layer raised it:

    {"success": false, "error": "<message>"}
    {"success": false, "error": "Validation failed", "errors": [...]}

- AppError (service layer)      → its own status and message
- RequestValidationError        → 400 with per-field detail
- Starlette HTTPException       → its status (unknown route, bad method)
- anything else                 → 500, logged, no internal detail leaked
"""

from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow.errors import AppError, InternalError
from taskflow.schemas.common import ErrorDetail, ErrorResponse

logger = structlog.get_logger()


def _envelope(status: int, body: ErrorResponse, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _error_details(exc: RequestValidationError) -> list[ErrorDetail]:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        location = loc[0] if loc else None
        field = ".".join(loc[1:]) or (location or "")
        message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        details.append(ErrorDetail(field=field, message=message, location=location))
    return details


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("http.app_error", path=request.url.path, error=exc.message)
    return _envelope(exc.status, ErrorResponse(error=exc.message), exc.headers)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _envelope(
        HTTPStatus.BAD_REQUEST,
        ErrorResponse(error="Validation failed", errors=_error_details(exc)),
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _envelope(
        exc.status_code,
        ErrorResponse(error=str(exc.detail)),
        getattr(exc, "headers", None),
    )


def internal_error_response(request: Request) -> JSONResponse:
    """Log the active exception and return the generic 500 envelope."""
    logger.exception("http.unhandled_error", path=request.url.path, method=request.method)
    return _envelope(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        ErrorResponse(error=InternalError.message),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Last resort for errors raised outside RequestIdMiddleware.
    return internal_error_response(request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
