"""
Tests for the ArrowHead API collector.

Uses httpx.MockTransport so no request leaves the process.
"""

import json

import httpx
import pytest

from core.exceptions import ErrorClassification, FetchError, ParseError
from data_ingestion.collectors.arrowhead import ArrowHeadApiClient, FEED_MAX_ENTRIES


BASE_URL = "https://war.example.test"


def make_collector(handler):
    client = httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )
    return ArrowHeadApiClient(base_url=BASE_URL, client=client), client


class TestResolveSeason:
    """Season resolution."""

    @pytest.mark.asyncio
    async def test_parses_war_id_and_keeps_raw_body(self):
        body = json.dumps({"id": 801}).encode()

        def handler(request):
            assert request.url.path == "/api/WarSeason/current/WarID"
            return httpx.Response(200, content=body)

        collector, client = make_collector(handler)
        async with client:
            season = await collector.resolve_season()

        assert season.war_id == 801
        assert season.season == "801"
        assert season.raw == body

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"not json", b"{}", b'{"id": "abc"}', b"[1, 2]"])
    async def test_malformed_body_raises_parse_error(self, body):
        collector, client = make_collector(lambda request: httpx.Response(200, content=body))

        async with client:
            with pytest.raises(ParseError) as exc_info:
                await collector.resolve_season()

        assert exc_info.value.artifact == "season"
        assert exc_info.value.is_recoverable


class TestArtifactRequests:
    """Paths, headers and parameters of artifact requests."""

    @pytest.mark.asyncio
    async def test_season_wide_paths_have_no_language(self):
        seen = []

        def handler(request):
            seen.append((request.url.path, request.headers.get("Accept-Language")))
            return httpx.Response(200, content=b"{}")

        collector, client = make_collector(handler)
        async with client:
            await collector.fetch_war_info("801")
            await collector.fetch_summary("801")

        assert seen == [
            ("/api/WarSeason/801/WarInfo", None),
            ("/api/Stats/war/801/summary", None),
        ]

    @pytest.mark.asyncio
    async def test_translated_paths_send_accept_language(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"payload")

        collector, client = make_collector(handler)
        async with client:
            status = await collector.fetch_status("801", "de-DE")
            await collector.fetch_feed("801", "fr-FR")
            await collector.fetch_assignments("801", "zh-Hans")

        assert status == b"payload"
        assert [r.url.path for r in seen] == [
            "/api/WarSeason/801/Status",
            "/api/NewsFeed/801",
            "/api/v2/Assignment/War/801",
        ]
        assert [r.headers["Accept-Language"] for r in seen] == ["de-DE", "fr-FR", "zh-Hans"]
        assert seen[1].url.params["maxEntries"] == str(FEED_MAX_ENTRIES)

    @pytest.mark.asyncio
    async def test_body_returned_untouched(self):
        body = b'{"weird":  "spacing" }\n'
        collector, client = make_collector(lambda request: httpx.Response(200, content=body))

        async with client:
            assert await collector.fetch_war_info("1") == body


class TestFetchErrors:
    """Mapping of transport and HTTP failures."""

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        collector, client = make_collector(lambda request: httpx.Response(503, text="busy"))

        async with client:
            with pytest.raises(FetchError) as exc_info:
                await collector.fetch_status("801", "en-US")

        error = exc_info.value
        assert error.status_code == 503
        assert error.language == "en-US"
        assert error.artifact == "status"
        assert error.classification == ErrorClassification.TRANSIENT

    @pytest.mark.asyncio
    async def test_not_found_is_non_recoverable(self):
        collector, client = make_collector(lambda request: httpx.Response(404))

        async with client:
            with pytest.raises(FetchError) as exc_info:
                await collector.fetch_summary("801")

        assert exc_info.value.status_code == 404
        assert not exc_info.value.is_recoverable

    @pytest.mark.asyncio
    async def test_connection_error_becomes_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        collector, client = make_collector(handler)
        async with client:
            with pytest.raises(FetchError) as exc_info:
                await collector.resolve_season()

        assert exc_info.value.status_code is None
        assert exc_info.value.context["cause_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_timeout_becomes_fetch_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        collector, client = make_collector(handler)
        async with client:
            with pytest.raises(FetchError, match="timeout"):
                await collector.fetch_feed("801", "en-US")


class TestClientOwnership:
    """Lifecycle of the underlying httpx client."""

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        collector, client = make_collector(lambda request: httpx.Response(200))

        async with collector:
            pass

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        collector = ArrowHeadApiClient(base_url=BASE_URL)

        async with collector:
            pass

        assert collector._client.is_closed
