"""
Data Ingestion - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the war sync layer.

- Artifact identifiers
- Season and snapshot value types
- Per-cycle report
- Collaborator interfaces (API and storage)

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable data structures where possible
- Payloads stay raw bytes, nothing is parsed here
- A language missing from a translation map means its fetch failed
- Collaborators are narrow ABCs passed in explicitly

============================================================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


# =============================================================
# ENUMS
# =============================================================

class ArtifactType(str, Enum):
    """Translated artifacts fetched once per language."""
    STATUS = "status"
    FEED = "feed"
    ASSIGNMENTS = "assignments"


TranslationMap = Dict[str, bytes]
"""Language identifier -> raw payload. Failed languages are absent."""


# =============================================================
# VALUE TYPES
# =============================================================

@dataclass(frozen=True)
class WarSeason:
    """The currently active war season."""
    war_id: int
    raw: bytes = b""

    @property
    def season(self) -> str:
        """Season identifier used to scope every downstream request."""
        return str(self.war_id)


@dataclass(frozen=True)
class Snapshot:
    """Everything one cycle fetched, handed to storage in a single call."""
    season: WarSeason
    war_info: bytes
    war_summary: bytes
    statuses: Mapping[str, bytes] = field(default_factory=dict)
    feeds: Mapping[str, bytes] = field(default_factory=dict)
    assignments: Mapping[str, bytes] = field(default_factory=dict)

    def translations(self) -> Dict[ArtifactType, Mapping[str, bytes]]:
        """Translated maps keyed by artifact type."""
        return {
            ArtifactType.STATUS: self.statuses,
            ArtifactType.FEED: self.feeds,
            ArtifactType.ASSIGNMENTS: self.assignments,
        }


@dataclass
class SyncReport:
    """Summary of a committed cycle. Carries no payloads."""
    war_id: int
    languages: List[str] = field(default_factory=list)
    succeeded: Dict[str, List[str]] = field(default_factory=dict)
    failed: Dict[str, List[str]] = field(default_factory=dict)

    def record(self, artifact: ArtifactType, result: Mapping[str, Any]) -> None:
        """Record which languages made it into the map for one artifact."""
        self.succeeded[artifact.value] = [lang for lang in self.languages if lang in result]
        self.failed[artifact.value] = [lang for lang in self.languages if lang not in result]

    @property
    def failure_count(self) -> int:
        """Number of per-language fetches absorbed this cycle."""
        return sum(len(langs) for langs in self.failed.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/monitoring."""
        return {
            "war_id": self.war_id,
            "languages": list(self.languages),
            "succeeded": {k: list(v) for k, v in self.succeeded.items()},
            "failed": {k: list(v) for k, v in self.failed.items()},
        }


# =============================================================
# COLLABORATORS
# =============================================================

class WarApi(ABC):
    """
    Remote war API, as seen by the sync service.

    Every method may raise; the sync service does not distinguish
    error types. Cancellation is asyncio task cancellation.
    """

    @abstractmethod
    async def resolve_season(self) -> WarSeason:
        """Resolve the currently active war season."""
        pass

    @abstractmethod
    async def fetch_war_info(self, season: str) -> bytes:
        pass

    @abstractmethod
    async def fetch_summary(self, season: str) -> bytes:
        pass

    @abstractmethod
    async def fetch_status(self, season: str, language: str) -> bytes:
        pass

    @abstractmethod
    async def fetch_feed(self, season: str, language: str) -> bytes:
        pass

    @abstractmethod
    async def fetch_assignments(self, season: str, language: str) -> bytes:
        pass


class SnapshotStore(ABC):
    """Storage that receives completed snapshots."""

    @abstractmethod
    async def commit(self, snapshot: Snapshot) -> None:
        """
        Persist a snapshot atomically.

        Committing the same snapshot twice must be harmless.

        Raises:
            Exception: Any failure aborts the current cycle
        """
        pass


def dedupe_languages(languages: Optional[List[str]]) -> List[str]:
    """Drop blanks and repeated languages, keeping first-seen order."""
    return list(dict.fromkeys(lang.strip() for lang in (languages or []) if lang and lang.strip()))
