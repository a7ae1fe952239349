"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
The sync scheduler - drives WarSyncService on a timer.

- Runs one cycle at a time, never overlapping
- Resets to the nominal interval after a success
- Backs off (capped at the nominal interval) after a failure
- Keeps running across failures until stopped

============================================================
STATE MACHINE
============================================================
    IDLE -> RUNNING -> SLEEPING -> IDLE -> ...
               |          |
               +----------+--> STOPPED (stop requested)

Stop is observed while sleeping and while a cycle is in
flight; an interrupted cycle is cancelled, not counted as a
failure, and no further cycle starts.

============================================================
"""

import asyncio
import json
import logging
import sys
from datetime import timedelta
from typing import Any, Awaitable, Dict, Optional, TypeVar
from uuid import uuid4

from .backoff import DEFAULT_RETRY_STEP, compute_next_delay
from .models import CycleHistory, CycleResult, SchedulerState, SyncConfig
from core.clock import ClockProtocol, SystemClock
from core.exceptions import ConfigurationError
from data_ingestion.sync_service import WarSyncService


T = TypeVar("T")


# ============================================================
# LOGGING SETUP
# ============================================================

class JsonFormatter(logging.Formatter):
    """One JSON object per line, traceback included when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
) -> logging.Logger:
    """
    Set up process-wide logging.

    Args:
        level: Log level
        log_format: Output format (json or text)

    Returns:
        The scheduler logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    return logging.getLogger("sync.scheduler")


class _StopRequested(Exception):
    """Stop was requested while a cycle was in flight."""


# ============================================================
# SCHEDULER
# ============================================================

class SyncScheduler:
    """
    Periodic driver for the war sync.

    Failure count and next delay are owned here and only change
    between cycles.
    """

    def __init__(
        self,
        sync_service: WarSyncService,
        nominal_interval: timedelta,
        retry_step: timedelta = DEFAULT_RETRY_STEP,
        clock: Optional[ClockProtocol] = None,
        history_size: int = 50,
    ):
        """
        Initialize scheduler.

        Args:
            sync_service: Runs one cycle per call to run_cycle()
            nominal_interval: Delay between successful cycles
            retry_step: Backoff increment per consecutive failure
            clock: Clock for timing cycles
            history_size: Cycle results kept for get_status()

        Raises:
            ConfigurationError: If an interval is not positive
        """
        if nominal_interval <= timedelta(0):
            raise ConfigurationError(
                message=f"Nominal interval must be positive, got {nominal_interval}",
                config_key="interval_seconds",
            )
        if retry_step <= timedelta(0):
            raise ConfigurationError(
                message=f"Retry step must be positive, got {retry_step}",
                config_key="retry_step_seconds",
            )

        self._sync_service = sync_service
        self._nominal_interval = nominal_interval
        self._retry_step = retry_step
        self._clock = clock or SystemClock()
        self._logger = logging.getLogger("sync.scheduler")

        self._state = SchedulerState.IDLE
        self._failure_count = 0
        self._next_delay = nominal_interval
        self._stop_event = asyncio.Event()
        self._cycle_lock = asyncio.Lock()
        self._history = CycleHistory(history_size)

    @classmethod
    def from_config(
        cls,
        sync_service: WarSyncService,
        config: SyncConfig,
        clock: Optional[ClockProtocol] = None,
    ) -> "SyncScheduler":
        return cls(
            sync_service,
            nominal_interval=config.nominal_interval,
            retry_step=config.retry_step,
            clock=clock,
            history_size=config.history_size,
        )

    # --------------------------------------------------------
    # Properties
    # --------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def failure_count(self) -> int:
        """Consecutive failed cycles since the last success."""
        return self._failure_count

    @property
    def next_delay(self) -> timedelta:
        """Wait applied after the most recent cycle."""
        return self._next_delay

    @property
    def nominal_interval(self) -> timedelta:
        return self._nominal_interval

    @property
    def history(self) -> CycleHistory:
        return self._history

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # --------------------------------------------------------
    # Lifecycle
    # --------------------------------------------------------

    def stop(self) -> None:
        """Request the loop to stop. Safe to call more than once."""
        if not self._stop_event.is_set():
            self._logger.info("Stop requested")
        self._stop_event.set()

    async def run(self) -> None:
        """
        Run cycles until stop() is called or the task is cancelled.

        Cycle failures are logged and backed off, never raised.
        """
        self._logger.info(f"sync will run every {self._nominal_interval}")

        try:
            while not self._stop_event.is_set():
                result = await self.run_once()
                if result is None:
                    break

                self._state = SchedulerState.SLEEPING
                if await self._sleep(self._next_delay):
                    break
                self._state = SchedulerState.IDLE

        except asyncio.CancelledError:
            self._logger.info("Sync loop cancelled")
            raise
        finally:
            self._state = SchedulerState.STOPPED
            self._logger.info("Sync loop stopped")

    async def run_once(self) -> Optional[CycleResult]:
        """
        Run exactly one cycle and update failure bookkeeping.

        Returns:
            CycleResult, or None if stop was requested before or
            during the cycle
        """
        async with self._cycle_lock:
            if self._stop_event.is_set():
                return None

            self._state = SchedulerState.RUNNING
            cycle_id = uuid4().hex[:12]
            started_at = self._clock.now()
            started = self._clock.monotonic()

            try:
                report = await self._run_until_stopped(self._sync_service.run_cycle())

            except _StopRequested:
                self._logger.info(f"Cycle {cycle_id} interrupted by stop request")
                return None

            except Exception as e:
                duration = self._clock.elapsed_since(started)
                self._failure_count += 1
                self._next_delay = compute_next_delay(
                    self._failure_count,
                    self._nominal_interval,
                    self._retry_step,
                )
                self._logger.error(
                    f"An exception was thrown when synchronizing, it threw "
                    f"{self._failure_count} times since last sync | "
                    f"retrying in {self._next_delay}",
                    exc_info=True,
                )
                result = CycleResult(
                    cycle_id=cycle_id,
                    started_at=started_at,
                    duration_seconds=duration.total_seconds(),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    failure_count=self._failure_count,
                    next_delay_seconds=self._next_delay.total_seconds(),
                )

            else:
                duration = self._clock.elapsed_since(started)
                self._failure_count = 0
                self._next_delay = self._nominal_interval
                self._logger.info(f"Finished synchronizing in {duration}")
                result = CycleResult(
                    cycle_id=cycle_id,
                    started_at=started_at,
                    duration_seconds=duration.total_seconds(),
                    success=True,
                    failure_count=0,
                    next_delay_seconds=self._next_delay.total_seconds(),
                    report=report,
                )

            finally:
                if self._state == SchedulerState.RUNNING:
                    self._state = SchedulerState.IDLE

            self._history.add(result)
            return result

    # --------------------------------------------------------
    # Cancellation
    # --------------------------------------------------------

    async def _run_until_stopped(self, work: Awaitable[T]) -> T:
        """Await work, cancelling it if stop is requested first."""
        cycle = asyncio.ensure_future(work)
        stopper = asyncio.ensure_future(self._stop_event.wait())

        try:
            await asyncio.wait({cycle, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not cycle.done():
                cycle.cancel()
                await asyncio.gather(cycle, return_exceptions=True)

        if cycle.cancelled():
            if self._stop_event.is_set():
                raise _StopRequested()
            # Leaked from a collaborator; the outer task was not cancelled
            raise RuntimeError("cycle cancelled without a stop request")
        return cycle.result()

    async def _sleep(self, delay: timedelta) -> bool:
        """Wait for delay or a stop request. True if stopped."""
        self._logger.debug(f"Sleeping {delay} until next cycle")
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay.total_seconds())
        except asyncio.TimeoutError:
            return False
        return True

    # --------------------------------------------------------
    # Status
    # --------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status."""
        return {
            "state": self._state.value,
            "failure_count": self._failure_count,
            "next_delay_seconds": self._next_delay.total_seconds(),
            "nominal_interval_seconds": self._nominal_interval.total_seconds(),
            "stop_requested": self._stop_event.is_set(),
            "cycle_stats": self._history.get_statistics(),
        }


__all__ = [
    "SyncScheduler",
    "JsonFormatter",
    "setup_logging",
]
