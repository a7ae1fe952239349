"""
War Snapshot ORM Models.

============================================================
PURPOSE
============================================================
Holds the latest synchronized state of each war season for
downstream consumers.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Mutability: REPLACED on every committed cycle
- Source: WarSyncService snapshots
- Consumers: API layers reading the current war state

============================================================
MODELS
============================================================
- WarSnapshotRecord: Season-wide artifacts, one row per war
- TranslatedArtifactRecord: One row per (war, artifact, language)

============================================================
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Index,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import Base, PayloadHashMixin, TimestampMixin


class WarSnapshotRecord(Base, PayloadHashMixin, TimestampMixin):
    """
    Season-wide artifacts of the last committed snapshot of a war.

    Payloads are stored exactly as received.
    """

    __tablename__ = "war_snapshots"

    war_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        comment="War season identifier"
    )

    raw_season: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Unmodified season response"
    )

    war_info: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Unmodified war info response"
    )

    war_summary: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Unmodified war summary response"
    )

    synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the snapshot was committed"
    )

    __table_args__ = (
        Index("ix_war_snapshots_synced_at", "synced_at"),
    )

    def __repr__(self) -> str:
        return f"<WarSnapshotRecord(war_id={self.war_id}, synced_at={self.synced_at})>"


class TranslatedArtifactRecord(Base, PayloadHashMixin):
    """A translated artifact (status, feed, assignments) in one language."""

    __tablename__ = "translated_artifacts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    war_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="War season identifier"
    )

    artifact_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="status, feed or assignments"
    )

    language: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="Language identifier the payload was requested in"
    )

    payload: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Unmodified response body"
    )

    __table_args__ = (
        UniqueConstraint(
            "war_id", "artifact_type", "language",
            name="uq_translated_artifacts_war_type_language",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<TranslatedArtifactRecord(war_id={self.war_id}, "
            f"type={self.artifact_type}, language={self.language})>"
        )
