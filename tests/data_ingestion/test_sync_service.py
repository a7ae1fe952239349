"""
Tests for WarSyncService.

============================================================
TEST COVERAGE
============================================================
1. Happy path snapshot composition
2. Step ordering
3. Per-language failures absorbed
4. Season / war info / summary / commit failures abort
5. Empty language set
============================================================
"""

import asyncio
import logging

import pytest

from data_ingestion.sync_service import WarSyncService
from data_ingestion.types import ArtifactType, Snapshot


class TestRunCycleHappyPath:
    """A fully successful cycle."""

    @pytest.mark.asyncio
    async def test_commits_one_complete_snapshot(self, fake_api, recording_store, languages):
        service = WarSyncService(fake_api, recording_store, languages)

        report = await service.run_cycle()

        assert len(recording_store.snapshots) == 1
        snapshot = recording_store.snapshots[0]
        assert isinstance(snapshot, Snapshot)
        assert snapshot.season.war_id == 801
        assert snapshot.war_info == b"info:801"
        assert snapshot.war_summary == b"summary:801"
        assert snapshot.statuses == {
            "en-US": b"status:801:en-US",
            "fr-FR": b"status:801:fr-FR",
            "de-DE": b"status:801:de-DE",
        }
        assert set(snapshot.feeds) == set(languages)
        assert set(snapshot.assignments) == set(languages)

        assert report.war_id == 801
        assert report.failure_count == 0
        assert report.succeeded[ArtifactType.FEED.value] == languages

    @pytest.mark.asyncio
    async def test_season_gates_the_other_steps(self, fake_api, recording_store, languages):
        service = WarSyncService(fake_api, recording_store, languages)

        await service.run_cycle()

        steps = [name for name, _ in fake_api.calls]
        assert steps[:3] == ["season", "war_info", "summary"]
        assert sorted(steps[3:]) == sorted(
            ["status"] * 3 + ["feed"] * 3 + ["assignments"] * 3
        )

    @pytest.mark.asyncio
    async def test_translated_requests_use_resolved_season(
        self, api_class, recording_store, languages,
    ):
        api = api_class(war_id=5020)
        service = WarSyncService(api, recording_store, languages)

        await service.run_cycle()

        snapshot = recording_store.snapshots[0]
        assert snapshot.assignments["de-DE"] == b"assignments:5020:de-DE"

    @pytest.mark.asyncio
    async def test_duplicate_configured_languages_collapsed(self, fake_api, recording_store):
        service = WarSyncService(fake_api, recording_store, ["en-US", "en-US", "fr-FR"])

        await service.run_cycle()

        assert service.languages == ("en-US", "fr-FR")
        assert [lang for name, lang in fake_api.calls if name == "status"].count("en-US") == 1


class TestRunCyclePartialFailure:
    """Per-language failures do not abort the cycle."""

    @pytest.mark.asyncio
    async def test_failed_language_missing_from_that_artifact_only(
        self, fake_api, recording_store, languages,
    ):
        fake_api.fail[("status", "fr-FR")] = RuntimeError("status fr down")
        service = WarSyncService(fake_api, recording_store, languages)

        report = await service.run_cycle()

        snapshot = recording_store.snapshots[0]
        assert set(snapshot.statuses) == {"en-US", "de-DE"}
        assert set(snapshot.feeds) == set(languages)
        assert set(snapshot.assignments) == set(languages)
        assert report.failed[ArtifactType.STATUS.value] == ["fr-FR"]
        assert report.failure_count == 1

    @pytest.mark.asyncio
    async def test_artifact_failing_everywhere_still_commits(
        self, fake_api, recording_store, languages, caplog,
    ):
        caplog.set_level(logging.WARNING)
        fake_api.fail[("feed", "*")] = RuntimeError("feed down")
        service = WarSyncService(fake_api, recording_store, languages)

        await service.run_cycle()

        snapshot = recording_store.snapshots[0]
        assert snapshot.feeds == {}
        assert len(snapshot.statuses) == 3
        assert any(
            r.name == "sync.service" and "feed" in r.getMessage()
            for r in caplog.records
        )


class TestRunCycleAbort:
    """Failures that abort the cycle."""

    @pytest.mark.asyncio
    async def test_season_failure_aborts_before_anything_else(
        self, fake_api, recording_store, languages,
    ):
        fake_api.fail["season"] = ConnectionError("no season")
        service = WarSyncService(fake_api, recording_store, languages)

        with pytest.raises(ConnectionError):
            await service.run_cycle()

        assert fake_api.calls == [("season", None)]
        assert recording_store.snapshots == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("step", ["war_info", "summary"])
    async def test_season_wide_failure_aborts(
        self, fake_api, recording_store, languages, step,
    ):
        fake_api.fail[step] = TimeoutError(step)
        service = WarSyncService(fake_api, recording_store, languages)

        with pytest.raises(TimeoutError):
            await service.run_cycle()

        assert recording_store.snapshots == []
        assert not any(name == "status" for name, _ in fake_api.calls)

    @pytest.mark.asyncio
    async def test_commit_failure_propagates(self, fake_api, recording_store, languages):
        recording_store.fail = RuntimeError("database gone")
        service = WarSyncService(fake_api, recording_store, languages)

        with pytest.raises(RuntimeError, match="database gone"):
            await service.run_cycle()


class TestRunCycleEdgeCases:
    """Language set edge cases and cancellation."""

    @pytest.mark.asyncio
    async def test_no_languages_commits_empty_maps(self, fake_api, recording_store):
        service = WarSyncService(fake_api, recording_store, [])

        report = await service.run_cycle()

        snapshot = recording_store.snapshots[0]
        assert snapshot.statuses == {}
        assert snapshot.feeds == {}
        assert snapshot.assignments == {}
        assert [name for name, _ in fake_api.calls] == ["season", "war_info", "summary"]
        assert report.failure_count == 0

    @pytest.mark.asyncio
    async def test_cancel_during_fan_out_skips_commit(
        self, api_class, recording_store, languages,
    ):
        class SlowStatusApi(api_class):
            async def fetch_status(self, season, language):
                await asyncio.Event().wait()

        api = SlowStatusApi()
        service = WarSyncService(api, recording_store, languages)

        task = asyncio.create_task(service.run_cycle())
        while not any(name == "feed" for name, _ in api.calls):
            await asyncio.sleep(0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert recording_store.snapshots == []
