"""
Data Ingestion - ArrowHead API Collector.

============================================================
RESPONSIBILITY
============================================================
Fetches war artifacts from the ArrowHead game API.

- Resolves the active war season
- Fetches season-wide and per-language artifacts
- Returns raw response bodies untouched

============================================================
DESIGN PRINCIPLES
============================================================
- No business logic - collection only
- Only the season response is parsed
- Transport and HTTP failures become FetchError
- Language is selected with the Accept-Language header

============================================================
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from core.exceptions import ErrorClassification, FetchError, ParseError
from data_ingestion.types import ArtifactType, WarApi, WarSeason


DEFAULT_BASE_URL = "https://api.live.prod.thehelldiversgame.com"
FEED_MAX_ENTRIES = 1024


class ArrowHeadApiClient(WarApi):
    """
    Collector for the ArrowHead war API.

    ============================================================
    WIRING
    ============================================================
    Source: ArrowHead API (REST)
    Consumer: WarSyncService

    The client owns its httpx.AsyncClient unless one is injected.
    Use it as an async context manager, or call aclose().

    ============================================================
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the collector.

        Args:
            base_url: API root
            timeout_seconds: Per-request timeout
            client: Pre-built client (tests inject a MockTransport here)
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_seconds,
        )
        self._logger = logging.getLogger("collector.arrowhead")

    async def __aenter__(self) -> "ArrowHeadApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this collector created it."""
        if self._owns_client:
            await self._client.aclose()

    # =========================================================
    # SEASON-WIDE ARTIFACTS
    # =========================================================

    async def resolve_season(self) -> WarSeason:
        """
        Resolve the active war season.

        Raises:
            FetchError: On network or API errors
            ParseError: If the body is not {"id": <int>}
        """
        raw = await self._get("/api/WarSeason/current/WarID", artifact="season")

        try:
            data = json.loads(raw)
            war_id = int(data["id"])
        except (ValueError, TypeError, KeyError) as e:
            raise ParseError(
                message=f"Unexpected season response: {raw[:200]!r}",
                artifact="season",
                cause=e,
            )

        return WarSeason(war_id=war_id, raw=raw)

    async def fetch_war_info(self, season: str) -> bytes:
        return await self._get(f"/api/WarSeason/{season}/WarInfo", artifact="war_info")

    async def fetch_summary(self, season: str) -> bytes:
        return await self._get(f"/api/Stats/war/{season}/summary", artifact="summary")

    # =========================================================
    # TRANSLATED ARTIFACTS
    # =========================================================

    async def fetch_status(self, season: str, language: str) -> bytes:
        return await self._get(
            f"/api/WarSeason/{season}/Status",
            artifact=ArtifactType.STATUS.value,
            language=language,
        )

    async def fetch_feed(self, season: str, language: str) -> bytes:
        return await self._get(
            f"/api/NewsFeed/{season}",
            artifact=ArtifactType.FEED.value,
            language=language,
            params={"maxEntries": FEED_MAX_ENTRIES},
        )

    async def fetch_assignments(self, season: str, language: str) -> bytes:
        return await self._get(
            f"/api/v2/Assignment/War/{season}",
            artifact=ArtifactType.ASSIGNMENTS.value,
            language=language,
        )

    # =========================================================
    # HTTP
    # =========================================================

    async def _get(
        self,
        path: str,
        artifact: str,
        language: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        """
        GET a path and return the raw body.

        Raises:
            FetchError: On network or API errors
        """
        headers = {"Accept-Language": language} if language else {}

        try:
            response = await self._client.get(path, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            # Rate limit (429) and server errors are worth retrying next cycle
            transient = status == 429 or status >= 500
            raise FetchError(
                message=f"HTTP {status} for {path}: {e.response.text[:200]}",
                artifact=artifact,
                language=language,
                status_code=status,
                classification=(
                    ErrorClassification.TRANSIENT if transient
                    else ErrorClassification.NON_RECOVERABLE
                ),
                cause=e,
            )
        except httpx.TimeoutException as e:
            raise FetchError(
                message=f"Request timeout for {path}: {e}",
                artifact=artifact,
                language=language,
                cause=e,
            )
        except httpx.RequestError as e:
            raise FetchError(
                message=f"Request error for {path}: {e}",
                artifact=artifact,
                language=language,
                cause=e,
            )

        self._logger.debug(
            f"Fetched {artifact} ({language or 'n/a'}): {len(response.content)} bytes"
        )
        return response.content
