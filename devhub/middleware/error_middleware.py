"""
Error Handling Middleware

Last line of defence for exceptions that escape a route handler.
"""

from typing import Callable
from fastapi import Request, Response, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError

from devhub.services.error_handler import (
    error_handler,
    DevHubError,
    ErrorCategory,
    ErrorSeverity,
    STATUS_CODES,
)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for handling unhandled exceptions."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.error_mappings = {
            PydanticValidationError: (ErrorCategory.VALIDATION, ErrorSeverity.MEDIUM),
            SQLAlchemyError: (ErrorCategory.DATABASE, ErrorSeverity.HIGH),
            ConnectionError: (ErrorCategory.NETWORK, ErrorSeverity.HIGH),
            TimeoutError: (ErrorCategory.NETWORK, ErrorSeverity.MEDIUM),
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any unhandled exceptions."""
        try:
            response = await call_next(request)
            return response

        except HTTPException as e:
            # Let FastAPI handle HTTP exceptions normally
            raise e

        except Exception as e:
            return self._handle_unhandled_exception(request, e)

    def _handle_unhandled_exception(
        self,
        request: Request,
        error: Exception
    ) -> JSONResponse:
        category, severity = self._classify_error(error)

        context = {
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else None,
        }

        error_report = error_handler.handle_error(
            error=error,
            category=category,
            severity=severity,
            context=context,
            operation=f"{request.method} {request.url.path}"
        )

        if isinstance(error, DevHubError):
            message = error.message
        else:
            message = "Server error"

        return JSONResponse(
            status_code=STATUS_CODES.get(category, 500),
            content={"error": message},
            headers={"X-Error-ID": error_report["error_id"]}
        )

    def _classify_error(self, error: Exception) -> tuple[ErrorCategory, ErrorSeverity]:
        """Classify error by type to determine category and severity."""
        if isinstance(error, DevHubError):
            return error.category, ErrorSeverity.MEDIUM

        for mapped_type, (category, severity) in self.error_mappings.items():
            if isinstance(error, mapped_type):
                return category, severity

        return ErrorCategory.SYSTEM, ErrorSeverity.HIGH
