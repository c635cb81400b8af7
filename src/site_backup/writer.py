"""Persist page records and end-of-run artifacts to the backup tree."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from site_backup.classifier import url_path
from site_backup.config import OutputConfig
from site_backup.models import CrawlStats, PageRecord, TemplateCategory
from site_backup.paths import output_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistedPage:
    """Files written for one page."""

    name: str
    html_path: Path
    json_path: Path
    overwritten_url: Optional[str] = None


def _staging_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.tmp")


def _stage_text(path: Path, text: str) -> Path:
    """Write ``text`` to a hidden sibling of ``path`` and return the sibling."""
    path.parent.mkdir(parents=True, exist_ok=True)
    staged = _staging_path(path)
    with open(staged, "w", encoding="utf-8") as f:
        f.write(text)
    return staged


def _stage_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    staged = _staging_path(path)
    with open(staged, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)
    return staged


def _write_json(path: Path, data: Any) -> None:
    try:
        os.replace(_stage_json(path, data), path)
    finally:
        _staging_path(path).unlink(missing_ok=True)


class BackupWriter:
    """Write raw HTML and structured JSON for each page, plus run summaries."""

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self._claimed: dict[tuple[TemplateCategory, str], str] = {}
        self._lock = threading.Lock()

    def paths_for(self, record: PageRecord) -> tuple[str, Path, Path]:
        name = output_name(url_path(record.url))
        category = record.template_category.value
        return (
            name,
            self.config.pages_dir / category / f"{name}.html",
            self.config.data_dir / category / f"{name}.json",
        )

    def _claim(self, category: TemplateCategory, name: str, url: str) -> Optional[str]:
        """Register ``url`` as the owner of ``name``; return the URL it displaced, if any."""
        with self._lock:
            previous = self._claimed.get((category, name))
            self._claimed[(category, name)] = url
        if previous is not None and previous != url:
            return previous
        return None

    def write_page(self, record: PageRecord) -> PersistedPage:
        """Write both files for ``record``.

        Both files are staged as hidden siblings and only moved into place once
        each has been written completely. A failure while staging leaves the
        backup tree exactly as it was, including any page previously stored
        under the same name.
        """
        name, html_path, json_path = self.paths_for(record)
        try:
            staged_html = _stage_text(html_path, record.raw_markup)
            staged_json = _stage_json(json_path, record.to_json_dict())
            os.replace(staged_html, html_path)
            os.replace(staged_json, json_path)
        finally:
            _staging_path(html_path).unlink(missing_ok=True)
            _staging_path(json_path).unlink(missing_ok=True)

        overwritten = self._claim(record.template_category, name, record.url)
        if overwritten:
            logger.warning("%s and %s both map to %s; keeping the later page", overwritten, record.url, name)
        return PersistedPage(name=name, html_path=html_path, json_path=json_path, overwritten_url=overwritten)

    def write_template_analysis(self, analysis: dict[str, Any]) -> Path:
        path = self.config.analysis_path
        _write_json(path, analysis)
        logger.info("Wrote template analysis for %d templates to %s", len(analysis), path)
        return path

    def write_asset_urls(self, urls: list[str]) -> Path:
        path = self.config.assets_path
        _write_json(path, urls)
        logger.info("Wrote %d asset URLs to %s", len(urls), path)
        return path

    def write_stats(self, stats: CrawlStats) -> Path:
        path = self.config.stats_path
        _write_json(path, stats.model_dump(mode="json", by_alias=True))
        logger.info("Wrote crawl stats to %s", path)
        return path
