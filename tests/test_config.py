"""Tests for the config module."""

from pathlib import Path

import pytest

from site_backup.config import BackupConfig, CrawlConfig, TemplateRule
from site_backup.models import TemplateCategory


class TestBackupConfig:
    def test_default_config(self) -> None:
        config = BackupConfig()
        assert config.crawl.concurrency == 3
        assert config.crawl.delay_seconds == 0.5
        assert config.crawl.timeout_seconds == 30.0
        assert config.extraction.navigation_limit == 20
        assert config.extraction.clean_text_limit == 5000
        assert config.output.sample_size == 5

    def test_default_template_order(self) -> None:
        config = BackupConfig()
        assert [rule.category for rule in config.templates] == [
            TemplateCategory.HOME,
            TemplateCategory.ARTICLE,
            TemplateCategory.BOOK,
            TemplateCategory.CHAPTER,
            TemplateCategory.CATEGORY,
            TemplateCategory.CONCEPT,
            TemplateCategory.AUTHOR,
            TemplateCategory.STATIC,
        ]

    def test_output_layout(self) -> None:
        config = BackupConfig()
        config.output.backup_dir = Path("/srv/backup")
        assert config.output.pages_dir == Path("/srv/backup/pages")
        assert config.output.analysis_path == Path("/srv/backup/templates/analysis.json")
        assert config.output.assets_path == Path("/srv/backup/assets/asset-urls.json")
        assert config.output.stats_path == Path("/srv/backup/data/crawl-stats.json")

    def test_yaml_roundtrip(self, tmp_path: Path) -> None:
        config = BackupConfig()
        config.crawl.concurrency = 7
        config.crawl.user_agent = "TestBot/1.0"

        path = tmp_path / "config.yaml"
        config.to_yaml(path)
        loaded = BackupConfig.from_yaml(path)

        assert loaded.crawl.concurrency == 7
        assert loaded.crawl.user_agent == "TestBot/1.0"
        assert loaded.templates == config.templates
        assert loaded.extraction.selectors == config.extraction.selectors

    def test_from_env_and_file_no_file(self) -> None:
        config = BackupConfig.from_env_and_file(path=None)
        assert config.crawl.concurrency == 3

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SITE_BACKUP_CRAWL__CONCURRENCY", "5")
        assert BackupConfig().crawl.concurrency == 5


class TestValidation:
    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValueError, match="invalid template pattern"):
            TemplateRule(category=TemplateCategory.STATIC, pattern="^/(unclosed")

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            CrawlConfig(concurrency=0)
