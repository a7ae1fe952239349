"""
Storage Package.

This package persists committed war snapshots.

Modules:
- engine: Engine, session and transaction management
- models/: ORM models
- snapshot_store: SnapshotStore implementation and read helpers
"""

from storage.engine import (
    create_database_engine,
    create_session_factory,
    transaction_scope,
    create_all_tables,
    verify_database_connection,
)
from storage.snapshot_store import SqlSnapshotStore, compute_payload_hash


__all__ = [
    "create_database_engine",
    "create_session_factory",
    "transaction_scope",
    "create_all_tables",
    "verify_database_connection",
    "SqlSnapshotStore",
    "compute_payload_hash",
]
