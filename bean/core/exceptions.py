"""
Error types raised by services and the handlers that turn them into the
JSON error envelope {"success": false, "error": ..., "error_code": ...}
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

class BeanException(HTTPException):
    """HTTP error carrying a machine-readable error_code"""

    default_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"
    default_code = "ERROR"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=self.default_status,
            detail=detail or self.default_detail,
            headers=headers
        )
        self.error_code = error_code or self.default_code

class BadRequestException(BeanException):
    default_detail = "Bad request"
    default_code = "BAD_REQUEST"

class UnauthorizedException(BeanException):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "UNAUTHORIZED"

    def __init__(self, detail: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(detail, error_code, headers={"WWW-Authenticate": "Bearer"})

class ForbiddenException(BeanException):
    default_status = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"
    default_code = "FORBIDDEN"

class NotFoundException(BeanException):
    default_status = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"
    default_code = "NOT_FOUND"

class ConflictException(BeanException):
    default_status = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
    default_code = "CONFLICT"

class UpstreamFailureException(BeanException):
    """Data store or auth backend unavailable"""
    default_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable"
    default_code = "UPSTREAM_FAILURE"

# Loyalty rule violations
class AlreadyRedeemedException(BadRequestException):
    """A one-time code was used before"""
    default_detail = "This QR code has already been redeemed. Please use a new one."
    default_code = "ALREADY_REDEEMED"

class InsufficientPointsException(BadRequestException):
    default_code = "INSUFFICIENT_POINTS"

    def __init__(self, required: int):
        super().__init__(f"Insufficient points balance. {required} points required.")

class DuplicateResourceException(ConflictException):
    default_code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(f"{resource} with {field} '{value}' already exists")

def error_envelope(detail: str, error_code: Optional[str]) -> Dict[str, Any]:
    return {"success": False, "error": detail, "error_code": error_code}

async def bean_exception_handler(request: Request, exc: BeanException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.detail, exc.error_code),
        headers=exc.headers,
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail), "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope(f"{field}: {message}" if field else message, "VALIDATION_ERROR"),
    )

async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Data store failure on {request.method} {request.url.path}")
    failure = UpstreamFailureException()
    return JSONResponse(
        status_code=failure.status_code,
        content=error_envelope(failure.detail, failure.error_code),
    )

def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as the JSON error envelope"""
    app.add_exception_handler(BeanException, bean_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
