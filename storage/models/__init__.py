"""
Storage ORM Models.

- base: Declarative base and mixins
- war: War snapshot and translated artifact tables
"""

from storage.models.base import Base, PayloadHashMixin, TimestampMixin
from storage.models.war import WarSnapshotRecord, TranslatedArtifactRecord


__all__ = [
    "Base",
    "TimestampMixin",
    "PayloadHashMixin",
    "WarSnapshotRecord",
    "TranslatedArtifactRecord",
]
