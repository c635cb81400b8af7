"""Shared fixtures: fake browser sessions and a throwaway backup config."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Union

import pytest

from site_backup.config import BackupConfig

BASE_URL = "https://www.example.com"

SIMPLE_PAGE = """
<html>
<head><title>{title}</title></head>
<body class="body"><main class="main"><h1>{title}</h1><p>Contenido de prueba.</p></main></body>
</html>
"""


class FakeFetcher:
    """Serves canned HTML, or raises the canned exception, per URL."""

    def __init__(self, pages: dict[str, Union[str, Exception]]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        result = self.pages.get(url, SIMPLE_PAGE.format(title=url))
        if isinstance(result, Exception):
            raise result
        return result


class FakeBrowser:
    """Session opener that records one FakeFetcher per lane."""

    def __init__(self, pages: dict[str, Union[str, Exception]] | None = None) -> None:
        self.pages = pages or {}
        self.sessions: list[FakeFetcher] = []
        self.closed = 0

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[FakeFetcher]:
        fetcher = FakeFetcher(self.pages)
        self.sessions.append(fetcher)
        try:
            yield fetcher
        finally:
            self.closed += 1

    def __call__(self):
        return self._session()


@pytest.fixture
def backup_config(tmp_path: Path) -> BackupConfig:
    config = BackupConfig()
    config.crawl.delay_seconds = 0.0
    config.crawl.urls_file = tmp_path / "urls.txt"
    config.output.backup_dir = tmp_path / "backup"
    return config
