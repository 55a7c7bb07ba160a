"""Error Hierarchy — typed, categorized exceptions for all BuildHub failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with BuildHubError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Skipped matrix expansion and malformed axis values are NOT errors (no class here)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    build_id: int | None = None
    repository_id: int | None = None
    event: str | None = None
    debug_info: dict[str, Any] | None = None


class BuildHubError(Exception):
    """Base exception for all BuildHub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "build_id": self.context.build_id,
                    "repository_id": self.context.repository_id,
                    "event": self.context.event,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class RepositoryRequiredError(BuildHubError):
    """Build creation attempted without a repository association."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A build must belong to a repository",
            "REPOSITORY_REQUIRED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = "repository_id"


class UnknownViewError(BuildHubError):
    """Requested JSON projection view does not exist."""
    def __init__(self, view: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown view '{view}'",
            "UNKNOWN_VIEW", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.view = view


class ResourceNotFoundError(BuildHubError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ConcurrencyError(BuildHubError):
    """Concurrent modification detected (e.g. duplicate build number)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(BuildHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class SummarySyncError(BuildHubError):
    """Repository last-build summary could not be written."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Repository summary sync failed: {message}",
            "SUMMARY_SYNC_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class NotificationDeliveryError(BuildHubError):
    """Pub/sub transport rejected or failed to deliver an event."""
    def __init__(
        self,
        message: str,
        transport_error_type: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Notification delivery error ({transport_error_type}): {message}",
            "NOTIFICATION_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 503,
        )
        self.transport_error_type = transport_error_type
