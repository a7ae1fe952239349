"""
Data Ingestion - War Sync Service.

============================================================
RESPONSIBILITY
============================================================
Runs one synchronization cycle against the war API.

- Resolves the active season
- Fetches season-wide artifacts
- Fans out translated artifacts per language
- Commits the composed snapshot to storage

============================================================
WORKFLOW
============================================================
1. Resolve current season (gates everything below)
2. Fetch war info, then war summary
3. Fan out status, feed and assignments (concurrently)
4. Commit one Snapshot

Steps 1, 2 and 4 raise on failure and abort the cycle.
Per-language failures in step 3 are absorbed by the fan-out.

============================================================
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from data_ingestion.fanout import fan_out
from data_ingestion.types import (
    ArtifactType,
    Snapshot,
    SnapshotStore,
    SyncReport,
    TranslationMap,
    WarApi,
    dedupe_languages,
)


class WarSyncService:
    """
    Sequences one sync cycle.

    ============================================================
    USAGE
    ============================================================
    ```python
    service = WarSyncService(api, store, languages=["en-US", "de-DE"])
    report = await service.run_cycle()
    ```

    ============================================================
    """

    def __init__(
        self,
        api: WarApi,
        store: SnapshotStore,
        languages: Sequence[str],
        max_concurrent_fetches: Optional[int] = None,
    ) -> None:
        """
        Initialize the sync service.

        Args:
            api: Remote war API
            store: Snapshot storage
            languages: Languages to fetch translated artifacts in
            max_concurrent_fetches: Per fan-out cap on in-flight fetches
        """
        self._api = api
        self._store = store
        self._languages = tuple(dedupe_languages(list(languages)))
        self._max_concurrent_fetches = max_concurrent_fetches
        self._logger = logging.getLogger("sync.service")

    @property
    def languages(self) -> Sequence[str]:
        return self._languages

    async def run_cycle(self) -> SyncReport:
        """
        Run a single synchronization cycle.

        Returns:
            SyncReport describing what was committed

        Raises:
            Exception: From season resolution, war info, summary or commit
            asyncio.CancelledError: If cancelled mid-cycle
        """
        war_season = await self._api.resolve_season()
        season = war_season.season
        self._logger.debug(f"Resolved current season {season}")

        war_info = await self._api.fetch_war_info(season)
        war_summary = await self._api.fetch_summary(season)

        statuses, feeds, assignments = await asyncio.gather(
            self._download(
                ArtifactType.STATUS,
                lambda language: self._api.fetch_status(season, language),
            ),
            self._download(
                ArtifactType.FEED,
                lambda language: self._api.fetch_feed(season, language),
            ),
            self._download(
                ArtifactType.ASSIGNMENTS,
                lambda language: self._api.fetch_assignments(season, language),
            ),
        )

        report = SyncReport(war_id=war_season.war_id, languages=list(self._languages))
        report.record(ArtifactType.STATUS, statuses)
        report.record(ArtifactType.FEED, feeds)
        report.record(ArtifactType.ASSIGNMENTS, assignments)

        await self._store.commit(
            Snapshot(
                season=war_season,
                war_info=war_info,
                war_summary=war_summary,
                statuses=statuses,
                feeds=feeds,
                assignments=assignments,
            )
        )

        self._logger.info(
            f"Committed snapshot for season {season} | "
            f"status={len(statuses)} feed={len(feeds)} "
            f"assignments={len(assignments)} of {len(self._languages)} languages"
        )
        return report

    async def _download(
        self,
        artifact: ArtifactType,
        fetch: Callable[[str], Awaitable[bytes]],
    ) -> TranslationMap:
        result = await fan_out(
            self._languages,
            fetch,
            artifact.value,
            max_concurrency=self._max_concurrent_fetches,
        )
        if self._languages and not result:
            self._logger.warning(
                f"No language succeeded for {artifact.value}, committing it empty"
            )
        return result
