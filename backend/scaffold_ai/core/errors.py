"""Error Hierarchy - typed, categorized exceptions for every Scaffold failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - ErrorContext records where it happened (workflow type, step, upstream endpoint);
      it is logged, never sent to clients
    - to_response() produces the REST envelope: top-level "error" + "details"
    - Request errors are 400-level; configuration and upstream failures are 500-level
    - StepSkipped never reaches HTTP: the workflow loop turns it into text

Design Decisions:
    - Single hierarchy with ScaffoldError base: FastAPI global handler catches all
    - Upstream error bodies are carried verbatim in details (they are not ours to reshape)
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
    CONFIGURATION = "configuration"
    EXTERNAL_API = "external_api"
    WORKFLOW = "workflow"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Observability context attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    workflow_type: str | None = None
    step: str | None = None
    endpoint: str | None = None

    def log_fields(self) -> dict:
        """Set fields only, shaped for logging extra=."""
        fields = {
            "workflow_type": self.workflow_type,
            "step": self.step,
            "endpoint": self.endpoint,
        }
        return {k: v for k, v in fields.items() if v is not None}


class ScaffoldError(Exception):
    """Base exception for all Scaffold errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        body = {"error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


# ─── Request Errors (400-level) ─────────────────────────────────

class InvalidRequestError(ScaffoldError):
    """Request body is missing a field or carries an unusable value."""
    def __init__(self, message: str, details: Any = None, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400, details,
        )


# ─── Server-side Errors (500-level) ─────────────────────────────

class ConfigurationError(ScaffoldError):
    """A required secret is not configured."""
    def __init__(self, message: str, details: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500, details,
        )

    def to_response(self) -> dict:
        body = super().to_response()
        body["status"] = self.http_status
        return body


class UpstreamAPIError(ScaffoldError):
    """A third-party API answered with a non-success status."""
    def __init__(
        self,
        message: str,
        provider: str,
        upstream_status: int | None = None,
        details: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "UPSTREAM_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 500, details,
        )
        self.provider = provider
        self.upstream_status = upstream_status

    def to_response(self) -> dict:
        body = super().to_response()
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        return body


class ExternalServiceError(ScaffoldError):
    """Calling a third-party service failed before a usable answer came back."""
    def __init__(self, message: str, details: Any = None, context: ErrorContext | None = None):
        super().__init__(
            message, "EXTERNAL_SERVICE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 500, details,
        )


class WorkflowExecutionError(ScaffoldError):
    """The workflow as a whole could not be executed."""
    def __init__(self, details: str, context: ErrorContext | None = None):
        super().__init__(
            "Failed to execute workflow", "WORKFLOW_EXECUTION_FAILED",
            ErrorCategory.WORKFLOW, ErrorSeverity.ERROR, context, 500, details,
        )


# ─── In-loop signals ────────────────────────────────────────────

class StepSkipped(ScaffoldError):
    """A step kind is recognized but its endpoint is unavailable."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "STEP_SKIPPED", ErrorCategory.WORKFLOW,
            ErrorSeverity.INFO, context, 200,
        )
