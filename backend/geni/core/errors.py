"""Error Hierarchy: typed, categorized exceptions for all Geni failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST error envelope
    - No genotype data, tokens or secrets appear in messages

Design Decisions:
    - Single hierarchy with GeniError base: the FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    report_id: str | None = None
    service: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class GeniError(Exception):
    """Base exception for all Geni errors."""

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
                    "report_id": self.context.report_id,
                    "service": self.context.service,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class UploadTooLargeError(GeniError):
    """Uploaded genotype file exceeds the configured size limit."""
    def __init__(self, size: int, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"File is {size} bytes; the limit is {limit} bytes.",
            "UPLOAD_TOO_LARGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 413,
        )
        self.size = size
        self.limit = limit


class NoSNPsFoundError(GeniError):
    """Uploaded file contained no parseable SNP rows."""
    def __init__(self, total_lines: int, context: ErrorContext | None = None):
        super().__init__(
            "No valid SNP rows found. Upload a raw data export from 23andMe or AncestryDNA.",
            "NO_SNPS_FOUND", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.total_lines = total_lines


class InvalidTokenError(GeniError):
    """Session token missing, malformed, forged or expired."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TOKEN", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PaymentRequiredError(GeniError):
    """Operation needs a paid plan."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A purchased report is required for this operation.",
            "PAYMENT_REQUIRED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 402,
        )


class ResourceNotFoundError(GeniError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class NoPurchaseFoundError(GeniError):
    """Restore requested for an email with no paid purchase."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No purchase found", "NO_PURCHASE_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.INFO, context, 404,
        )


class ReportDecryptionError(GeniError):
    """Stored report failed authentication (wrong key or tampered data)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Stored report could not be decrypted.",
            "REPORT_DECRYPTION_FAILED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(GeniError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalServiceError(GeniError):
    """Call to a third-party service (Resend, Polar) failed."""
    def __init__(
        self,
        service: str,
        message: str,
        error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.service = service
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"{service} error ({error_type}): {message}",
            "EXTERNAL_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.service = service
        self.error_type = error_type


class ConfigurationError(GeniError):
    """Required setting is missing or invalid."""
    def __init__(self, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"Setting '{setting}' is not configured",
            "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting
