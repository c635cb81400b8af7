"""Configuration models for the backup crawler."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from site_backup.models import TemplateCategory


class TemplateRule(BaseModel):
    """One (category, path pattern) pair of the classifier's priority table."""

    model_config = ConfigDict(frozen=True)

    category: TemplateCategory
    pattern: str = Field(description="Regex searched against the URL path")

    @field_validator("pattern")
    @classmethod
    def pattern_must_compile(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as exc:
            msg = f"invalid template pattern {v!r}: {exc}"
            raise ValueError(msg) from exc
        return v


def default_template_rules() -> list[TemplateRule]:
    """Priority-ordered rules for the site; earlier rules win."""
    return [
        TemplateRule(category=TemplateCategory.HOME, pattern=r"^/$"),
        TemplateRule(category=TemplateCategory.ARTICLE, pattern=r"^/articulos/"),
        TemplateRule(category=TemplateCategory.BOOK, pattern=r"^/libro/"),
        TemplateRule(category=TemplateCategory.CHAPTER, pattern=r"^/capitulos/"),
        TemplateRule(category=TemplateCategory.CATEGORY, pattern=r"^/categoria/"),
        TemplateRule(category=TemplateCategory.CONCEPT, pattern=r"^/conceptos/"),
        TemplateRule(category=TemplateCategory.AUTHOR, pattern=r"^/autores/"),
        TemplateRule(
            category=TemplateCategory.STATIC,
            pattern=(
                r"^/(sobre-nosotros|search|libros-de-la-biblia|lecturas-de-hoy"
                r"|conceptos-biblicos|articulos-recientes|personajes)$"
            ),
        ),
    ]


class CrawlConfig(BaseModel):
    """Crawler configuration."""

    urls_file: Path = Field(default=Path("backup/data/urls.txt"), description="Newline-delimited list of URLs to crawl")
    concurrency: int = Field(default=3, ge=1, le=50, description="Number of parallel lanes (browser sessions)")
    delay_seconds: float = Field(default=0.5, ge=0.0, le=60.0, description="Pause after every page within a lane")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0, description="Navigation timeout per page")
    user_agent: str = Field(
        default="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 LBE-Backup-Bot/1.0",
        description="User-Agent of every browser session",
    )
    headless: bool = Field(default=True, description="Run the browser without a window")


class SelectorConfig(BaseModel):
    """CSS selectors used by the content extractor."""

    model_config = ConfigDict(frozen=True)

    navigation: str = "nav a, header a"
    # Tried one by one; the first with any text wins
    main_content: tuple[str, ...] = ("main", '[role="main"]', "body")
    headline: str = "h1"
    article: str = "article"
    author: str = '[class*="author"], [rel="author"]'
    date_time: str = "time[datetime]"
    date: str = '[class*="date"]'
    article_categories: str = '[class*="category"] a, [class*="tag"] a'
    book_description: str = '[class*="description"], [class*="intro"]'
    book_chapters: str = '[class*="chapter"] a, [class*="capitulo"] a'
    book_reference: str = '[class*="book-ref"], [class*="libro"]'
    verse_content: str = '[class*="verse"], [class*="content"], article'
    previous_chapter: str = 'a[href*="capitulos"][class*="prev"], a[rel~="prev"]'
    next_chapter: str = 'a[href*="capitulos"][class*="next"], a[rel~="next"]'


class ExtractionConfig(BaseModel):
    """Content extraction configuration."""

    navigation_limit: int = Field(default=20, ge=0, le=20, description="Keep at most this many navigation links")
    clean_text_limit: int = Field(default=5000, ge=0, le=5000, description="Hard cut-off for the page's clean text")
    strip_tags: list[str] = Field(
        default_factory=lambda: ["script", "style", "noscript"],
        description="Elements removed before any text is extracted",
    )
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)


class OutputConfig(BaseModel):
    """Output layout configuration."""

    backup_dir: Path = Field(default=Path("backup"), description="Root of the backup tree")
    sample_size: int = Field(default=5, ge=0, le=1000, description="Files sampled per template in the analysis")

    @property
    def pages_dir(self) -> Path:
        return Path(self.backup_dir) / "pages"

    @property
    def data_dir(self) -> Path:
        return Path(self.backup_dir) / "data"

    @property
    def analysis_path(self) -> Path:
        return Path(self.backup_dir) / "templates" / "analysis.json"

    @property
    def assets_path(self) -> Path:
        return Path(self.backup_dir) / "assets" / "asset-urls.json"

    @property
    def stats_path(self) -> Path:
        return self.data_dir / "crawl-stats.json"


class BackupConfig(BaseSettings):
    """Top-level backup configuration."""

    model_config = SettingsConfigDict(env_prefix="SITE_BACKUP_", env_nested_delimiter="__")

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    templates: list[TemplateRule] = Field(default_factory=default_template_rules)
    log_level: str = Field(default="INFO", description="Logging level")

    @classmethod
    def from_yaml(cls, path: str | Path) -> BackupConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_env_and_file(cls, path: Optional[str | Path] = None) -> BackupConfig:
        """Load from YAML file (if given), with env-var overrides."""
        if path and Path(path).exists():
            return cls.from_yaml(path)
        return cls()

    def to_yaml(self, path: str | Path) -> None:
        """Persist current config to YAML."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)
