"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the custom exceptions for the war synchronizer.

- Provides clear exception hierarchy
- Carries context for debugging and logging
- Classifies recoverability for operators

The sync loop itself never branches on these types: any
failure of a cycle is treated the same way. They exist so
collaborators can report WHAT went wrong.

============================================================
EXCEPTION HIERARCHY
============================================================
SyncException (base)
├── ConfigurationError
├── FetchError
│   └── ParseError
└── StorageError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, sync is not possible without intervention."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """Error can be recovered from automatically."""

    TRANSIENT = "transient"
    """Temporary error, retry may succeed."""

    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class SyncException(Exception):
    """
    Base exception for all synchronizer errors.

    All exceptions carry:
    - severity: for log level decisions
    - context: for debugging
    - classification: recoverability
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def is_recoverable(self) -> bool:
        """Check if error is recoverable."""
        return self.classification in (
            ErrorClassification.RECOVERABLE,
            ErrorClassification.TRANSIENT,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return self.message


# ============================================================
# CONFIGURATION
# ============================================================

class ConfigurationError(SyncException):
    """Invalid or missing configuration. Raised before the loop starts."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {}) or {}
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


# ============================================================
# REMOTE API
# ============================================================

class FetchError(SyncException):
    """Error fetching an artifact from the remote war API."""

    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        artifact: Optional[str] = None,
        language: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {}) or {}
        if artifact:
            context["artifact"] = artifact
        if language:
            context["language"] = language
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context=context, **kwargs)
        self.artifact = artifact
        self.language = language
        self.status_code = status_code


class ParseError(FetchError):
    """The remote API answered, but the body could not be interpreted."""

    default_classification = ErrorClassification.RECOVERABLE


# ============================================================
# STORAGE
# ============================================================

class StorageError(SyncException):
    """Error committing a snapshot to storage."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {}) or {}
        if operation:
            context["operation"] = operation
        super().__init__(message, context=context, **kwargs)
        self.operation = operation
