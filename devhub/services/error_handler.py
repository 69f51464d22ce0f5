"""
Error Handling Service

Exception taxonomy shared by the request tier and the client tier, plus the
handler that logs unexpected failures with an error id.
"""

import logging
import traceback
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    DATABASE = "database"
    NETWORK = "network"
    EXTERNAL_API = "external_api"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


STATUS_CODES = {
    ErrorCategory.AUTHENTICATION: 401,
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.DATABASE: 500,
    ErrorCategory.NETWORK: 503,
    ErrorCategory.EXTERNAL_API: 502,
    ErrorCategory.SYSTEM: 500,
}


class DevHubError(Exception):
    """Base exception for DevHub operations."""
    category = ErrorCategory.SYSTEM

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.category]


class AuthenticationError(DevHubError):
    """Missing, expired or invalid session."""
    category = ErrorCategory.AUTHENTICATION


class ValidationError(DevHubError):
    """A form submission that cannot be normalized."""
    category = ErrorCategory.VALIDATION


class QueryError(DevHubError):
    """A Record Store read or write failed."""
    category = ErrorCategory.DATABASE


class NetworkError(DevHubError):
    """A client-side request did not produce a usable response."""
    category = ErrorCategory.NETWORK


class OAuthError(DevHubError):
    """The OAuth provider rejected or failed the code exchange."""
    category = ErrorCategory.EXTERNAL_API


class ErrorRecord:
    """Represents an error occurrence with context."""

    def __init__(
        self,
        error: Exception,
        category: ErrorCategory,
        severity: ErrorSeverity,
        context: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ):
        self.error = error
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.operation = operation
        self.timestamp = datetime.now(timezone.utc)
        self.error_id = f"{category.value}_{int(self.timestamp.timestamp())}"

        self.error_type = type(error).__name__
        self.error_message = str(error)
        self.stack_trace = traceback.format_exc()


class ErrorHandlerService:
    """Service for logging and reporting errors."""

    def handle_error(
        self,
        error: Exception,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Log an error and return a report describing it.

        Args:
            error: The exception that occurred
            category: Category of the error
            severity: Severity level of the error
            context: Additional context information
            operation: Name of the operation that failed

        Returns:
            Dictionary with the error id, category and message
        """
        record = ErrorRecord(
            error=error,
            category=category,
            severity=severity,
            context=context,
            operation=operation,
        )


        log_level = {
            ErrorSeverity.LOW: logging.INFO,
            ErrorSeverity.MEDIUM: logging.WARNING,
            ErrorSeverity.HIGH: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL
        }.get(severity, logging.ERROR)

        logger.log(
            log_level,
            f"Error {record.error_id} in {operation}: {record.error_message}",
            extra={
                "error_id": record.error_id,
                "category": category.value,
                "severity": severity.value,
                "context": record.context,
            }
        )

        return {
            "error_id": record.error_id,
            "timestamp": record.timestamp.isoformat(),
            "error_type": record.error_type,
            "error_message": record.error_message,
            "category": category.value,
            "severity": severity.value,
            "operation": operation,
        }


error_handler = ErrorHandlerService()
