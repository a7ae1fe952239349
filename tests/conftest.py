"""
Shared fixtures for the war sync tests.

Provides an in-memory war API and a recording snapshot store so
sync, scheduler and CLI tests run without network or database.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from data_ingestion.types import Snapshot, SnapshotStore, WarApi, WarSeason


# ============================================================
# FAKE COLLABORATORS
# ============================================================

class FakeWarApi(WarApi):
    """
    War API returning predictable payloads.

    Failures are configured through `fail`:
    - "season", "war_info", "summary"
    - (artifact, language) for one language
    - (artifact, "*") for every language of an artifact
    """

    def __init__(self, war_id: int = 801):
        self.war_id = war_id
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.fail: Dict[object, Exception] = {}

    async def __aenter__(self) -> "FakeWarApi":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    def _check(self, key) -> None:
        if key in self.fail:
            raise self.fail[key]

    async def resolve_season(self) -> WarSeason:
        self.calls.append(("season", None))
        self._check("season")
        return WarSeason(war_id=self.war_id, raw=b'{"id": %d}' % self.war_id)

    async def fetch_war_info(self, season: str) -> bytes:
        self.calls.append(("war_info", None))
        self._check("war_info")
        return f"info:{season}".encode()

    async def fetch_summary(self, season: str) -> bytes:
        self.calls.append(("summary", None))
        self._check("summary")
        return f"summary:{season}".encode()

    async def _translated(self, artifact: str, season: str, language: str) -> bytes:
        self.calls.append((artifact, language))
        self._check((artifact, "*"))
        self._check((artifact, language))
        return f"{artifact}:{season}:{language}".encode()

    async def fetch_status(self, season: str, language: str) -> bytes:
        return await self._translated("status", season, language)

    async def fetch_feed(self, season: str, language: str) -> bytes:
        return await self._translated("feed", season, language)

    async def fetch_assignments(self, season: str, language: str) -> bytes:
        return await self._translated("assignments", season, language)


class RecordingStore(SnapshotStore):
    """Snapshot store that keeps committed snapshots in memory."""

    def __init__(self):
        self.snapshots: List[Snapshot] = []
        self.fail: Optional[Exception] = None

    async def commit(self, snapshot: Snapshot) -> None:
        if self.fail is not None:
            raise self.fail
        self.snapshots.append(snapshot)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def fake_api():
    """War API with no configured failures."""
    return FakeWarApi()


@pytest.fixture
def recording_store():
    """Snapshot store recording every commit."""
    return RecordingStore()


@pytest.fixture
def languages():
    return ["en-US", "fr-FR", "de-DE"]


@pytest.fixture
def api_class():
    """FakeWarApi class, for tests that subclass it or pick a war id."""
    return FakeWarApi
