"""
Data Ingestion - Translation Fan-out.

============================================================
RESPONSIBILITY
============================================================
Fetches the same artifact once per language, concurrently.

- One task per language
- Failure isolation between languages
- Result holds only the languages that succeeded

============================================================
DESIGN PRINCIPLES
============================================================
- A failed language is logged once and left out of the result
- Losing every language is a valid (empty) result, not an error
- Cancellation is never absorbed: the caller gets CancelledError
  and no partial mapping

============================================================
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, Optional, TypeVar


T = TypeVar("T")


logger = logging.getLogger("sync.fanout")


async def fan_out(
    languages: Iterable[str],
    fetch: Callable[[str], Awaitable[T]],
    artifact: str,
    *,
    max_concurrency: Optional[int] = None,
    log: Optional[logging.Logger] = None,
) -> Dict[str, T]:
    """
    Run fetch(language) for every language and collect the successes.

    Args:
        languages: Language identifiers, fetched at most once each
        fetch: Coroutine function returning the payload for a language
        artifact: Artifact name used when reporting failures
        max_concurrency: Cap on in-flight fetches (None = unbounded)
        log: Logger for failure reports (defaults to sync.fanout)

    Returns:
        Mapping of language -> payload, in input order, for languages
        whose fetch succeeded

    Raises:
        asyncio.CancelledError: If cancelled while fetches are pending
    """
    log = log or logger
    ordered = list(dict.fromkeys(languages))
    if not ordered:
        return {}

    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    limiter = asyncio.Semaphore(max_concurrency or len(ordered))
    fetched: Dict[str, T] = {}

    async def download(language: str) -> None:
        async with limiter:
            try:
                payload = await fetch(language)
            except Exception:
                log.warning(
                    f"Failed to download translations for {language} of {artifact}",
                    exc_info=True,
                )
                return
        fetched[language] = payload

    tasks = [
        asyncio.ensure_future(download(language))
        for language in ordered
    ]
    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    return {language: fetched[language] for language in ordered if language in fetched}
