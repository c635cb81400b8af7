"""Shared data models used across crawl stages."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class TemplateCategory(str, Enum):
    """Structural kind of a page, derived from its URL path."""

    HOME = "home"
    ARTICLE = "article"
    BOOK = "book"
    CHAPTER = "chapter"
    CATEGORY = "category"
    CONCEPT = "concept"
    AUTHOR = "author"
    STATIC = "static"
    UNKNOWN = "unknown"


class CamelModel(BaseModel):
    """Base for everything written to disk: camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageMetadata(CamelModel):
    url: str = ""
    title: str = ""
    description: str = ""
    og_title: str = ""
    og_image: str = ""
    canonical: str = ""


class TemplateClasses(CamelModel):
    """Raw class attributes of the root and main containers (diagnostic only)."""

    body: str = ""
    main: str = ""


class Link(CamelModel):
    href: str = ""
    text: str = ""


class Image(CamelModel):
    src: str = ""
    alt: str = ""


class ArticleContent(CamelModel):
    headline: str = ""
    author: str = ""
    date: str = ""
    categories: list[str] = Field(default_factory=list)
    body: str = ""


class BookContent(CamelModel):
    book_name: str = ""
    description: str = ""
    chapters: list[Link] = Field(default_factory=list)


class ChapterContent(CamelModel):
    chapter_title: str = ""
    book_reference: str = ""
    verse_content: str = ""
    previous_chapter: str = ""
    next_chapter: str = ""


class EmptyContent(CamelModel):
    """Structured content for categories without a dedicated schema."""

    model_config = ConfigDict(extra="forbid")


StructuredContent = Union[ArticleContent, BookContent, ChapterContent, EmptyContent]

STRUCTURED_CONTENT_MODELS: dict[TemplateCategory, type[CamelModel]] = {
    TemplateCategory.ARTICLE: ArticleContent,
    TemplateCategory.BOOK: BookContent,
    TemplateCategory.CHAPTER: ChapterContent,
}


def content_model_for(category: TemplateCategory) -> type[CamelModel]:
    return STRUCTURED_CONTENT_MODELS.get(category, EmptyContent)


class PageRecord(CamelModel):
    """Result of fetching and extracting one URL."""

    url: str
    template_category: TemplateCategory
    metadata: PageMetadata = Field(default_factory=PageMetadata)
    template_classes: TemplateClasses = Field(default_factory=TemplateClasses)
    navigation: list[Link] = Field(default_factory=list, max_length=20)
    images: list[Image] = Field(default_factory=list)
    structured_content: StructuredContent = Field(default=None, validate_default=True)
    raw_markup: str = Field(default="", exclude=True)
    clean_text: str = Field(default="", max_length=5000)

    @field_validator("structured_content", mode="before")
    @classmethod
    def content_must_match_category(cls, v: object, info: ValidationInfo) -> object:
        category = info.data.get("template_category")
        if category is None:
            return v
        expected = content_model_for(category)
        if v is None:
            return expected()
        if isinstance(v, BaseModel):
            if type(v) is not expected:
                msg = f"{type(v).__name__} is not valid structured content for '{category.value}' pages"
                raise ValueError(msg)
            return v
        return expected.model_validate(v or {})

    def to_json_dict(self) -> dict:
        """Serialisable form of the record, without the raw markup."""
        return self.model_dump(mode="json", by_alias=True)


class CrawlError(CamelModel):
    url: str
    message: str


class NameCollision(CamelModel):
    """Two distinct URLs that were persisted under the same file name."""

    name: str
    category: TemplateCategory
    url: str
    previous_url: str


class CrawlStats(CamelModel):
    """Run statistics, accumulated by every lane."""

    total: int = 0
    success: int = 0
    failed: int = 0
    by_template: dict[str, int] = Field(default_factory=dict)
    errors: list[CrawlError] = Field(default_factory=list)
    collisions: list[NameCollision] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None
    duration: Optional[float] = None

    @property
    def duration_seconds(self) -> float:
        if self.duration is not None:
            return self.duration
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0
