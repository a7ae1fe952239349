"""
Orchestrator Package - Scheduling Layer.

============================================================
PACKAGE OVERVIEW
============================================================
This package drives the war synchronizer on a timer.
It owns WHEN a cycle runs; data_ingestion owns WHAT a cycle does.

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                    SyncScheduler                    |
    |-----------------------------------------------------|
    |  Backoff        |  Linear ramp capped at interval   |
    |  SyncConfig     |  Environment + CLI configuration  |
    |  CycleHistory   |  Recent cycle outcomes            |
    |  CLI            |  Command-line host                |
    +-----------------------------------------------------+
                            |
                            v
                    WarSyncService.run_cycle()

============================================================
USAGE
============================================================
```python
from orchestrator import SyncScheduler

scheduler = SyncScheduler(service, nominal_interval=timedelta(seconds=20))
task = asyncio.create_task(scheduler.run())
...
scheduler.stop()
await task
```

============================================================
"""

from .backoff import compute_next_delay, DEFAULT_RETRY_STEP
from .models import (
    SchedulerState,
    SyncConfig,
    CycleResult,
    CycleHistory,
    DEFAULT_LANGUAGES,
)
from .core import SyncScheduler, setup_logging


__all__ = [
    "compute_next_delay",
    "DEFAULT_RETRY_STEP",
    "SchedulerState",
    "SyncConfig",
    "CycleResult",
    "CycleHistory",
    "DEFAULT_LANGUAGES",
    "SyncScheduler",
    "setup_logging",
]
