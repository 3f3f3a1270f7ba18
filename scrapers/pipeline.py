from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from core.models import ScrapeResult
from scrapers.base import UpstreamSession
from scrapers.classifier import classify
from scrapers.normalizer import normalize
from scrapers.twitter import TwikitSession, TwitterFetcher

log = logging.getLogger(__name__)


class ScrapePipeline:
    """Runs classify -> fetch -> normalize over a batch of URLs.

    URLs are handled one at a time in input order against a single session
    that is logged in before the first URL and logged out after the last.
    A failure on one URL is recorded on its result and never stops the batch.
    """

    def __init__(
        self,
        session_factory: Callable[[], UpstreamSession] = TwikitSession,
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    async def run(self, urls: Sequence[str]) -> list[ScrapeResult]:
        start = time.monotonic()
        session = self._session_factory()
        await self._login(session)

        fetcher = TwitterFetcher(session, timeout=self._timeout)
        results: list[ScrapeResult] = []
        try:
            for url in urls:
                results.append(await self._scrape_one(fetcher, url))
        finally:
            await self._logout(session)

        log.info(
            "Finished batch | %d urls | %d errors | %.1fs",
            len(results),
            sum(1 for r in results if r.error is not None),
            time.monotonic() - start,
        )
        return results

    async def _scrape_one(self, fetcher: TwitterFetcher, url: str) -> ScrapeResult:
        classified = classify(url)
        result = ScrapeResult(url=url, category=classified.category)
        log.info(
            "Processing URL: %s (Type: %s, ID: %s)",
            url,
            classified.category.value,
            classified.identifier or "N/A",
        )
        try:
            record = await fetcher.fetch(classified)
            result.content = normalize(record)
        except Exception as e:
            log.warning("Error scraping %s: %s", url, e)
            result.error = str(e) or "Scraping failed"
            return result

        if result.content is None:
            log.warning("Upstream returned no content for %s", url)
        return result

    async def _login(self, session: UpstreamSession) -> None:
        try:
            await session.login()
        except Exception as e:
            log.error(
                "Login failed. Proceeding without login, functionality may be limited: %s",
                e,
            )

    async def _logout(self, session: UpstreamSession) -> None:
        if not session.authenticated:
            log.info("Skipping logout as not logged in.")
            return
        try:
            await session.logout()
            log.info("Logged out.")
        except Exception as e:
            log.error("Logout failed: %s", e)
