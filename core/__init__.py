"""
Core Module Package.

This package contains the infrastructure components
that all other packages depend on.

Components:
- clock: Time abstraction (UTC timestamps, cycle timing)
- exceptions: Custom exception hierarchy
"""

from core.clock import ClockProtocol, SystemClock, MockClock
from core.exceptions import (
    Severity,
    ErrorClassification,
    SyncException,
    ConfigurationError,
    FetchError,
    ParseError,
    StorageError,
)


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "Severity",
    "ErrorClassification",
    "SyncException",
    "ConfigurationError",
    "FetchError",
    "ParseError",
    "StorageError",
]
