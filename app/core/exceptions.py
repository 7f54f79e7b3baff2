from typing import Dict, Any, Optional
from datetime import datetime
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)


class BaseCustomException(Exception):
    """Base class for custom exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


class TenantHeaderError(BaseCustomException):
    """Raised when a request carries no tenant header and one is required"""

    def __init__(
        self,
        message: str = "Tenant header is required",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code=error_code or "TENANT_HEADER_MISSING"
        )


class TenantContextError(BaseCustomException):
    """Tenant context read outside of a request scope"""

    def __init__(
        self,
        message: str = "No tenant is bound to the current context",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=error_code or "TENANT_CONTEXT_ERROR"
        )


class DatabaseError(BaseCustomException):
    """Exception for database errors"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=error_code or "DATABASE_ERROR"
        )


class ServiceTimeoutError(BaseCustomException):
    """Request exceeded its deadline"""

    def __init__(
        self,
        message: str = "Request timed out",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            details=details,
            error_code=error_code or "REQUEST_TIMEOUT"
        )


# Response models for errors
class ErrorResponse(BaseModel):
    """Standard error response model"""
    error: str
    message: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None
    request_id: Optional[str] = None


def create_error_response(
    exception: BaseCustomException,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create standardized error response"""
    response = {
        "error": exception.__class__.__name__.replace("Error", " Error"),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }

    if exception.details:
        response["details"] = exception.details

    return response


def error_json_response(exception: BaseCustomException, request_id: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=exception.status_code,
        content=create_error_response(exception, request_id),
    )


def handle_database_error(error: Exception, operation: str = "database operation") -> DatabaseError:
    """Handle database errors and convert to DatabaseError"""
    logger.error(f"Database error during {operation}: {error}")

    error_message = "Database operation failed"
    if "connect" in str(error).lower():
        error_message = "Database connection failed"
    elif "timeout" in str(error).lower():
        error_message = "Database operation timed out"
    elif "constraint" in str(error).lower():
        error_message = "Database constraint violation"

    # The driver message can carry connection strings, so only its type leaves the process
    return DatabaseError(
        message=error_message,
        details={"operation": operation, "error_type": type(error).__name__},
        error_code="DATABASE_OPERATION_ERROR"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render custom and store exceptions as the standard error body"""

    @app.exception_handler(BaseCustomException)
    async def custom_exception_handler(request: Request, exc: BaseCustomException):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        return error_json_response(exc, request.headers.get("X-Request-ID"))

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        error = handle_database_error(exc, f"{request.method} {request.url.path}")
        return error_json_response(error, request.headers.get("X-Request-ID"))

    @app.exception_handler(OSError)
    async def os_exception_handler(request: Request, exc: OSError):
        error = handle_database_error(exc, f"{request.method} {request.url.path}")
        return error_json_response(error, request.headers.get("X-Request-ID"))
