"""Run statistics shared by all crawl lanes."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from site_backup.models import CrawlError, CrawlStats, NameCollision, TemplateCategory


class StatsAggregator:
    """Lock-guarded owner of the run's :class:`CrawlStats`.

    Lanes never touch the stats object directly; every mutation goes through
    one of the ``record_*`` methods, so ``success + failed`` always equals the
    number of attempts recorded so far.
    """

    def __init__(self, total: int) -> None:
        self._stats = CrawlStats(total=total)
        self._lock = threading.Lock()
        self._finalized = False

    @property
    def total(self) -> int:
        return self._stats.total

    def record_success(self, category: TemplateCategory) -> int:
        """Count a persisted page. Returns the success count after the update."""
        with self._lock:
            self._stats.success += 1
            key = category.value
            self._stats.by_template[key] = self._stats.by_template.get(key, 0) + 1
            return self._stats.success

    def record_failure(self, url: str, message: str) -> int:
        """Count a failed page. Returns the failure count after the update."""
        with self._lock:
            self._stats.failed += 1
            self._stats.errors.append(CrawlError(url=url, message=message))
            return self._stats.failed

    def record_collision(self, collision: NameCollision) -> None:
        with self._lock:
            self._stats.collisions.append(collision)

    def snapshot(self) -> CrawlStats:
        """Consistent deep copy of the current stats."""
        with self._lock:
            return self._stats.model_copy(deep=True)

    def finalize(self) -> CrawlStats:
        """Stamp the end time and duration (once) and return the final stats."""
        with self._lock:
            if not self._finalized:
                self._stats.end_time = datetime.now(timezone.utc)
                self._stats.duration = (self._stats.end_time - self._stats.start_time).total_seconds()
                self._finalized = True
            return self._stats.model_copy(deep=True)
