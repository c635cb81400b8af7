"""Split the URL list into lanes and crawl them concurrently."""

from __future__ import annotations

import asyncio
import logging
import math
from contextlib import AbstractAsyncContextManager
from typing import Callable, Optional, Protocol, Sequence

from site_backup.classifier import TemplateClassifier, url_path
from site_backup.config import CrawlConfig
from site_backup.extractor import ContentExtractor
from site_backup.models import NameCollision, TemplateCategory
from site_backup.stats import StatsAggregator
from site_backup.writer import BackupWriter

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


SessionOpener = Callable[[], AbstractAsyncContextManager[Fetcher]]
PageCallback = Callable[[str, TemplateCategory, bool], None]


def partition(urls: Sequence[str], lanes: int) -> list[list[str]]:
    """Contiguous slices of ``ceil(len(urls) / lanes)`` URLs; the last may be shorter."""
    if lanes < 1:
        raise ValueError(f"lanes must be at least 1, got {lanes}")
    if not urls:
        return []
    size = math.ceil(len(urls) / lanes)
    return [list(urls[i : i + size]) for i in range(0, len(urls), size)]


class BatchScheduler:
    """Run one sequential lane per slice, all lanes concurrently.

    Each lane owns one browser session and walks its slice in order, pausing
    ``delay_seconds`` after every page. A failing page is recorded and the lane
    moves on; nothing a single page does can stop a lane or the run.
    """

    def __init__(
        self,
        config: CrawlConfig,
        classifier: TemplateClassifier,
        extractor: ContentExtractor,
        writer: BackupWriter,
        stats: StatsAggregator,
        open_session: SessionOpener,
        on_page: Optional[PageCallback] = None,
    ) -> None:
        self.config = config
        self._classifier = classifier
        self._extractor = extractor
        self._writer = writer
        self._stats = stats
        self._open_session = open_session
        self._on_page = on_page

    async def run(self, urls: Sequence[str]) -> None:
        """Crawl every URL; returns once every lane has exhausted its slice."""
        slices = partition(urls, self.config.concurrency)
        logger.info("Processing %d URLs in %d parallel lanes", len(urls), len(slices))
        await asyncio.gather(*(self._run_lane(lane_id, batch) for lane_id, batch in enumerate(slices)))

    async def _run_lane(self, lane_id: int, urls: list[str]) -> None:
        attempted = 0
        try:
            async with self._open_session() as fetcher:
                for url in urls:
                    await self._process(fetcher, url)
                    attempted += 1
                    await asyncio.sleep(self.config.delay_seconds)
        except Exception as exc:
            remaining = urls[attempted:]
            if not remaining:
                logger.warning("Lane %d did not close its browser session cleanly: %s", lane_id, exc)
                return
            logger.error("Lane %d lost its browser session, failing %d URLs: %s", lane_id, len(remaining), exc)
            for url in remaining:
                self._stats.record_failure(url, f"Browser session unavailable: {exc}")
                self._notify(url, self._classifier.classify_url(url), False)

    async def _process(self, fetcher: Fetcher, url: str) -> bool:
        """Fetch, extract and persist one URL. Never raises."""
        path = url_path(url)
        category = self._classifier.classify(path)
        try:
            html = await fetcher.fetch(url)
            record = self._extractor.extract(url, html, category)
            persisted = self._writer.write_page(record)
        except Exception as exc:
            self._stats.record_failure(url, str(exc))
            logger.error("[ERROR] %s: %s", path, exc)
            self._notify(url, category, False)
            return False

        if persisted.overwritten_url:
            self._stats.record_collision(
                NameCollision(
                    name=persisted.name,
                    category=category,
                    url=url,
                    previous_url=persisted.overwritten_url,
                )
            )
        success = self._stats.record_success(category)
        logger.info("[%d/%d] ✓ %s (%s)", success, self._stats.total, path, category.value)
        self._notify(url, category, True)
        return True

    def _notify(self, url: str, category: TemplateCategory, ok: bool) -> None:
        if self._on_page is None:
            return
        # The page is already counted at this point.
        try:
            self._on_page(url, category, ok)
        except Exception as exc:
            logger.warning("Progress callback failed for %s: %s", url, exc)
