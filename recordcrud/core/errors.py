"""Error Hierarchy - typed, categorized exceptions for every record lifecycle failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are recoverable by the caller; infrastructure errors are critical
    - to_response() produces a structured envelope for the embedding application
    - Codes are stable strings (VALIDATION_ERROR, RECORD_NOT_FOUND, ...) that callers
      compare against

Design Decisions:
    - Single hierarchy with CrudError base: embedding applications catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    IDENTIFIER = "identifier"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stage: str | None = None
    record_id: str | None = None
    debug_info: dict[str, Any] | None = None


class CrudError(Exception):
    """Base exception for all recordcrud errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to a standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "stage": self.context.stage,
                    "record_id": self.context.record_id,
                },
            }
        }


# ─── Domain Errors ──────────────────────────────────────────────

class ValidationFailedError(CrudError):
    """Candidate record violated the schema."""
    def __init__(
        self, field_errors: dict[str, str], context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid fields: {', '.join(sorted(field_errors))}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.field_errors = field_errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["field_errors"] = dict(self.field_errors)
        return response


class MissingDataError(CrudError):
    """Input envelope carries no record payload."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Input has no 'data' payload",
            "MISSING_DATA", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )


class RecordExistsError(CrudError):
    """Create collided with an existing record identifier."""
    def __init__(self, record_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.record_id = record_id
        super().__init__(
            f"Record '{record_id}' already exists",
            "RECORD_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )


class RecordNotFoundError(CrudError):
    """No record matched the access predicate and query."""
    def __init__(self, label: str | None = None, context: ErrorContext | None = None):
        message = f"{label} not found" if label else "Record not found"
        super().__init__(
            message, "RECORD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.label = label


class MissingIdError(CrudError):
    """Neither an identifier nor an alternate key could be resolved."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No record identifier available",
            "MISSING_ID", ErrorCategory.IDENTIFIER,
            ErrorSeverity.WARNING, context,
        )


class InvalidIdError(CrudError):
    """Identifier is not a well-formed native identifier."""
    def __init__(self, raw_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed record identifier: {raw_id!r}",
            "INVALID_ID", ErrorCategory.IDENTIFIER,
            ErrorSeverity.WARNING, context,
        )
        self.raw_id = raw_id


class InvalidQueryError(CrudError):
    """Predicate references a field the record model does not have."""
    def __init__(self, field_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown field in predicate: {field_name}",
            "INVALID_QUERY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field_name = field_name


# ─── Infrastructure Errors ──────────────────────────────────────

class CouldNotCreateRecordError(CrudError):
    """Store acknowledged no insert without reporting a conflict."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Store did not acknowledge the insert",
            "COULD_NOT_CREATE_RECORD", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )


class DatabaseError(CrudError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation


# ─── Recipe Errors ──────────────────────────────────────────────

class RecipeError(CrudError):
    """Recipe is malformed (unknown dependency, cycle) or unfit for the identity given."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "RECIPE_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )


class UnknownStageError(CrudError):
    """Requested target is neither a stage nor a request seed."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.stage = name
        super().__init__(
            f"Unknown stage '{name}'",
            "UNKNOWN_STAGE", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, ctx,
        )
        self.name = name
