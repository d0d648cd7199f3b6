"""Error Hierarchy - typed, categorized exceptions for all timetrack failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; storage and invariant errors (5xx) are critical
    - to_response() produces the REST error envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TimetrackError base: FastAPI global handler catches all
    - ErrorContext as dataclass: carries the (user, task) key and operation for the caller's logs
    - Invariant violations are their own class so they are never mistaken for domain outcomes
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


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
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: int | None = None
    task_id: int | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class TimetrackError(Exception):
    """Base exception for all timetrack errors."""

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

    @property
    def is_domain_error(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING)

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
                    "user_id": self.context.user_id,
                    "task_id": self.context.task_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class AlreadyStartedError(TimetrackError):
    """Start requested while the key already has an open interval."""
    def __init__(self, user_id: int, task_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext(user_id=user_id, task_id=task_id, operation="start")
        super().__init__(
            "Task already started", "ALREADY_STARTED", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, ctx, 409,
        )


class NotStartedError(TimetrackError):
    """Stop requested while the key has no open interval."""
    def __init__(self, user_id: int, task_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext(user_id=user_id, task_id=task_id, operation="stop")
        super().__init__(
            "Task not started", "NOT_STARTED", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, ctx, 409,
        )


class InvalidTimeRangeError(TimetrackError):
    """Report window is malformed (from after to, or naive bounds)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TIME_RANGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
        )


class ResourceNotFoundError(TimetrackError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(TimetrackError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class InvariantViolationError(TimetrackError):
    """Stored interval state contradicts an invariant. Indicates a bug, never corrected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVARIANT_VIOLATION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
