"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Configuration and state types for the sync scheduler.

- SchedulerState: loop states
- SyncConfig: runtime configuration (environment + CLI)
- CycleResult / CycleHistory: per-cycle bookkeeping

============================================================
"""

import math
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from core.exceptions import ConfigurationError
from data_ingestion.types import SyncReport, dedupe_languages


# ============================================================
# SCHEDULER STATE
# ============================================================

class SchedulerState(Enum):
    """
    States of the scheduler loop.

    IDLE -> RUNNING -> SLEEPING -> IDLE -> ...
    STOPPED is terminal and only reached on cancellation.
    """

    IDLE = "idle"
    RUNNING = "running"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


# ============================================================
# CONFIGURATION
# ============================================================

DEFAULT_LANGUAGES: Tuple[str, ...] = (
    "en-US",
    "de-DE",
    "es-ES",
    "ru-RU",
    "fr-FR",
    "it-IT",
    "pl-PL",
    "zh-Hans",
    "zh-Hant",
)

LOG_FORMATS = ("text", "json")


def parse_languages(value: Optional[str]) -> Tuple[str, ...]:
    """Comma separated languages. None means defaults, "" means none."""
    if value is None:
        return DEFAULT_LANGUAGES
    return tuple(dedupe_languages(value.split(",")))


def _env_number(name: str, default: str, cast=float):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(
            message=f"{name} must be a number, got {raw!r}",
            config_key=name,
        )


@dataclass
class SyncConfig:
    """Configuration for the synchronizer."""

    # Scheduling
    interval_seconds: float = 20.0
    """Delay between successful cycles."""

    retry_step_seconds: float = 1.0
    """Backoff ramp increment per consecutive failure."""

    languages: Tuple[str, ...] = DEFAULT_LANGUAGES
    """Languages translated artifacts are fetched in."""

    max_concurrent_fetches: int = 10
    """Cap on in-flight fetches within one fan-out."""

    # Remote API
    api_base_url: str = "https://api.live.prod.thehelldiversgame.com"
    """ArrowHead API root."""

    request_timeout_seconds: float = 30.0
    """Per-request timeout."""

    # Storage
    database_url: str = "sqlite:///war_sync.db"
    """SQLAlchemy database URL."""

    # Logging
    log_level: str = "INFO"
    """Logging level."""

    log_format: str = "text"
    """Log output format (text or json)."""

    history_size: int = 50
    """Number of cycle results kept for status reporting."""

    @property
    def nominal_interval(self) -> timedelta:
        return timedelta(seconds=self.interval_seconds)

    @property
    def retry_step(self) -> timedelta:
        return timedelta(seconds=self.retry_step_seconds)

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Load configuration from environment variables."""
        return cls(
            interval_seconds=_env_number("SYNC_INTERVAL_SECONDS", "20"),
            retry_step_seconds=_env_number("SYNC_RETRY_STEP_SECONDS", "1"),
            languages=parse_languages(os.getenv("SYNC_LANGUAGES")),
            max_concurrent_fetches=_env_number("SYNC_MAX_CONCURRENT_FETCHES", "10", int),
            api_base_url=os.getenv("ARROWHEAD_API_URL", cls.api_base_url),
            request_timeout_seconds=_env_number("ARROWHEAD_TIMEOUT_SECONDS", "30"),
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
            history_size=_env_number("SYNC_HISTORY_SIZE", "50", int),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not math.isfinite(self.interval_seconds) or self.interval_seconds <= 0:
            errors.append("interval_seconds must be a finite number greater than 0")

        if not math.isfinite(self.retry_step_seconds) or self.retry_step_seconds <= 0:
            errors.append("retry_step_seconds must be a finite number greater than 0")

        if self.max_concurrent_fetches < 1:
            errors.append("max_concurrent_fetches must be at least 1")

        if not math.isfinite(self.request_timeout_seconds) or self.request_timeout_seconds <= 0:
            errors.append("request_timeout_seconds must be a finite number greater than 0")

        if self.history_size < 1:
            errors.append("history_size must be at least 1")

        if self.log_format not in LOG_FORMATS:
            errors.append(f"log_format must be one of {', '.join(LOG_FORMATS)}")

        if not self.api_base_url:
            errors.append("api_base_url is required")

        return errors

    def ensure_valid(self) -> "SyncConfig":
        """
        Raise on invalid configuration.

        Raises:
            ConfigurationError: Listing every problem found
        """
        errors = self.validate()
        if errors:
            raise ConfigurationError(
                message=f"Invalid configuration: {', '.join(errors)}",
            )
        return self


# ============================================================
# CYCLE RESULT
# ============================================================

@dataclass
class CycleResult:
    """Outcome of one scheduler cycle."""

    cycle_id: str
    started_at: datetime
    duration_seconds: float = 0.0
    success: bool = False
    error: Optional[str] = None
    error_type: Optional[str] = None
    failure_count: int = 0
    next_delay_seconds: float = 0.0
    report: Optional[SyncReport] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "cycle_id": self.cycle_id,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type,
            "failure_count": self.failure_count,
            "next_delay_seconds": self.next_delay_seconds,
            "report": self.report.to_dict() if self.report else None,
        }


class CycleHistory:
    """
    Tracks recent cycle results.
    """

    def __init__(self, max_size: int = 50):
        self._cycles: Deque[CycleResult] = deque(maxlen=max_size)
        self._total = 0

    def add(self, result: CycleResult) -> None:
        self._cycles.append(result)
        self._total += 1

    def __len__(self) -> int:
        return len(self._cycles)

    def get_recent(self, limit: int = 10) -> List[CycleResult]:
        """Get recent cycles, oldest first."""
        return list(self._cycles)[-limit:]

    def get_last(self) -> Optional[CycleResult]:
        return self._cycles[-1] if self._cycles else None

    def get_success_rate(self) -> float:
        """Share of retained cycles that succeeded."""
        if not self._cycles:
            return 0.0
        return sum(1 for c in self._cycles if c.success) / len(self._cycles)

    def get_average_duration(self) -> float:
        if not self._cycles:
            return 0.0
        return sum(c.duration_seconds for c in self._cycles) / len(self._cycles)

    def get_statistics(self) -> Dict[str, Any]:
        """Get cycle statistics."""
        last = self.get_last()
        return {
            "total_cycles": self._total,
            "retained_cycles": len(self._cycles),
            "success_rate": self.get_success_rate(),
            "average_duration_seconds": self.get_average_duration(),
            "last_cycle": last.to_dict() if last else None,
        }
