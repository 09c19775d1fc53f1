"""Exception handlers: every failure leaves the API in one envelope.

``{"success": false, "error": {"code", "message", "details"?, "request_id"}}``

Codes come from the domain taxonomy in ``discuss_board.core.exceptions``;
framework and store errors are folded onto the same codes so clients never
branch on more than one vocabulary.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from discuss_board.config import settings
from discuss_board.core.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from discuss_board.core.logging import request_id_var

logger = logging.getLogger(__name__)

# Routing and security failures raised by Starlette itself
HTTP_STATUS_CODES = {
    status.HTTP_401_UNAUTHORIZED: UnauthenticatedError.code,
    status.HTTP_403_FORBIDDEN: ForbiddenError.code,
    status.HTTP_404_NOT_FOUND: NotFoundError.code,
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def _error_body(code: str, message: str, details: list | None = None) -> dict:
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    error["request_id"] = request_id_var.get()
    return {"success": False, "error": error}


def _respond(
    status_code: int,
    code: str,
    message: str,
    details: list | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_error_body(code, message, details), headers=headers)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return _respond(exc.status_code, exc.code, exc.message, exc.details, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and the like."""
    code = HTTP_STATUS_CODES.get(exc.status_code, f"HTTP_{exc.status_code}")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _respond(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies, paths and queries that do not parse. Always 422."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return _respond(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ValidationError.code,
        "The request could not be parsed.",
        details,
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # A unique index that lost a race surfaces here when no service caught it
    if isinstance(exc, IntegrityError):
        logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
        return _respond(ConflictError.status_code, ConflictError.code, "The change conflicts with existing data.")
    if isinstance(exc, DataError):
        logger.warning("Rejected value on %s %s: %s", request.method, request.url.path, exc.orig)
        return _respond(ValidationError.status_code, ValidationError.code, "A value is out of range.")

    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    message = f"Database error: {exc}" if settings.DEBUG else "The board is temporarily unavailable."
    return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = f"Internal error: {exc}" if settings.DEBUG else "An unexpected error occurred."
    return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
