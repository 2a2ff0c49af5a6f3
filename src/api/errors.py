"""
Standardized API Error Handling
================================

Provides consistent error responses across all API endpoints.

Usage:
    from src.api.errors import APIError, NotFoundError, api_exception_handler

    # Raise custom errors
    raise NotFoundError("Customer CUST-999 not found", customer_id="CUST-999")

    # Register handler with FastAPI
    app.add_exception_handler(APIError, api_exception_handler)
"""

import logging
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR RESPONSE MODELS
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str
    request_id: Optional[str] = None


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class APIError(Exception):
    """Base API error class."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=self.__class__.__name__,
            error_code=self.error_code,
            message=self.message,
            details=self.details,
            timestamp=datetime.now().isoformat(),
            request_id=request_id,
        )


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", **details):
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details,
        )


class ServiceUnavailableError(APIError):
    """Backing store unavailable."""

    def __init__(self, message: str = "Service unavailable", service: str = None, **details):
        if service:
            details["service"] = service
        super().__init__(
            message=message,
            error_code="SERVICE_UNAVAILABLE",
            status_code=503,
            details=details,
        )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def api_exception_handler(request: Request, exc: APIError) -> JSONResponse:
    """
    Handle APIError exceptions.

    Register with FastAPI:
        app.add_exception_handler(APIError, api_exception_handler)
    """
    request_id = getattr(request.state, "request_id", None)

    logger.warning(
        f"API Error: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "request_id": request_id,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(request_id).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Register with FastAPI:
        app.add_exception_handler(Exception, generic_exception_handler)
    """
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        f"Unexpected error: {str(exc)}",
        extra={
            "request_id": request_id,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="InternalServerError",
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            details={"error": str(exc)} if logger.isEnabledFor(logging.DEBUG) else None,
            timestamp=datetime.now().isoformat(),
            request_id=request_id,
        ).model_dump(),
    )
