"""
Data Ingestion Package.

This package handles one synchronization cycle.
No scheduling - acquisition and hand-off to storage only.

Sub-packages:
- collectors: Concrete remote API clients

Modules:
- fanout: Per-language concurrent fetch with failure isolation
- sync_service: Sequences one cycle and commits the snapshot
- types: Value types and collaborator interfaces
"""

from data_ingestion.fanout import fan_out
from data_ingestion.sync_service import WarSyncService
from data_ingestion.types import (
    ArtifactType,
    TranslationMap,
    WarSeason,
    Snapshot,
    SyncReport,
    WarApi,
    SnapshotStore,
    dedupe_languages,
)


__all__ = [
    # Service
    "WarSyncService",
    "fan_out",
    # Types
    "ArtifactType",
    "TranslationMap",
    "WarSeason",
    "Snapshot",
    "SyncReport",
    # Collaborators
    "WarApi",
    "SnapshotStore",
    "dedupe_languages",
]
