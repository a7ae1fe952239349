"""
Storage - Snapshot Store.

============================================================
RESPONSIBILITY
============================================================
Persists committed war snapshots and serves them to readers.

- One transaction per snapshot
- Translated rows always mirror the last committed snapshot
- Read helpers for downstream consumers

============================================================
DESIGN PRINCIPLES
============================================================
- Atomic: a snapshot lands whole or not at all
- Idempotent: committing the same snapshot twice is harmless
- Blocking database work runs in a worker thread

============================================================
"""

import asyncio
import hashlib
import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.clock import ClockProtocol, SystemClock
from data_ingestion.types import ArtifactType, Snapshot, SnapshotStore
from storage.engine import (
    create_all_tables,
    create_database_engine,
    create_session_factory,
    transaction_scope,
    verify_database_connection,
)
from storage.models import TranslatedArtifactRecord, WarSnapshotRecord


def compute_payload_hash(*payloads: bytes) -> str:
    """SHA-256 over one or more payloads."""
    digest = hashlib.sha256()
    for payload in payloads:
        digest.update(payload)
    return digest.hexdigest()


class SqlSnapshotStore(SnapshotStore):
    """
    SQLAlchemy-backed snapshot storage.

    ============================================================
    USAGE
    ============================================================
    ```python
    store = SqlSnapshotStore.from_url("sqlite:///war_sync.db")
    store.create_schema()
    await store.commit(snapshot)
    store.get_translation(801, ArtifactType.STATUS, "en-US")
    ```

    ============================================================
    """

    def __init__(
        self,
        engine: Engine,
        session_factory: Optional[sessionmaker] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory or create_session_factory(engine)
        self._clock = clock or SystemClock()
        self._logger = logging.getLogger("storage.snapshot")

    @classmethod
    def from_url(
        cls,
        database_url: Optional[str] = None,
        clock: Optional[ClockProtocol] = None,
        echo: bool = False,
    ) -> "SqlSnapshotStore":
        """Build a store with its own engine."""
        return cls(create_database_engine(database_url, echo=echo), clock=clock)

    def create_schema(self) -> None:
        create_all_tables(self._engine)

    def verify_connection(self) -> bool:
        return verify_database_connection(self._engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    # =========================================================
    # WRITE
    # =========================================================

    async def commit(self, snapshot: Snapshot) -> None:
        """
        Persist a snapshot.

        Raises:
            StorageError: If the transaction fails
        """
        await asyncio.to_thread(self._write, snapshot)

    def _write(self, snapshot: Snapshot) -> None:
        war_id = snapshot.season.war_id
        synced_at = self._clock.now()
        translated = 0

        with transaction_scope(self._session_factory) as session:
            record = session.get(WarSnapshotRecord, war_id)
            if record is None:
                record = WarSnapshotRecord(war_id=war_id)
                session.add(record)

            record.raw_season = snapshot.season.raw
            record.war_info = snapshot.war_info
            record.war_summary = snapshot.war_summary
            record.payload_hash = compute_payload_hash(
                snapshot.season.raw,
                snapshot.war_info,
                snapshot.war_summary,
            )
            record.synced_at = synced_at

            session.execute(
                delete(TranslatedArtifactRecord)
                .where(TranslatedArtifactRecord.war_id == war_id)
            )

            for artifact, by_language in snapshot.translations().items():
                for language, payload in by_language.items():
                    session.add(
                        TranslatedArtifactRecord(
                            war_id=war_id,
                            artifact_type=artifact.value,
                            language=language,
                            payload=payload,
                            payload_hash=compute_payload_hash(payload),
                        )
                    )
                    translated += 1

        self._logger.debug(
            f"Stored snapshot for war {war_id}: {translated} translated artifacts"
        )

    # =========================================================
    # READ
    # =========================================================

    def get_current_war_id(self) -> Optional[int]:
        """War id of the most recently committed snapshot."""
        with self._session_factory() as session:
            return session.scalar(
                select(WarSnapshotRecord.war_id)
                .order_by(WarSnapshotRecord.synced_at.desc())
                .limit(1)
            )

    def get_snapshot_record(self, war_id: int) -> Optional[WarSnapshotRecord]:
        with self._session_factory() as session:
            return session.get(WarSnapshotRecord, war_id)

    def get_war_info(self, war_id: int) -> Optional[bytes]:
        record = self.get_snapshot_record(war_id)
        return record.war_info if record else None

    def get_war_summary(self, war_id: int) -> Optional[bytes]:
        record = self.get_snapshot_record(war_id)
        return record.war_summary if record else None

    def get_translation(
        self,
        war_id: int,
        artifact: ArtifactType,
        language: str,
    ) -> Optional[bytes]:
        """Payload of one translated artifact, or None if not stored."""
        with self._session_factory() as session:
            return session.scalar(
                select(TranslatedArtifactRecord.payload).where(
                    TranslatedArtifactRecord.war_id == war_id,
                    TranslatedArtifactRecord.artifact_type == artifact.value,
                    TranslatedArtifactRecord.language == language,
                )
            )

    def list_languages(self, war_id: int, artifact: ArtifactType) -> List[str]:
        """Languages stored for one artifact, sorted."""
        with self._session_factory() as session:
            return sorted(
                session.scalars(
                    select(TranslatedArtifactRecord.language).where(
                        TranslatedArtifactRecord.war_id == war_id,
                        TranslatedArtifactRecord.artifact_type == artifact.value,
                    )
                )
            )
