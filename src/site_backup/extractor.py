"""Content extraction: turn rendered HTML into template-aware page records."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from site_backup.config import ExtractionConfig, SelectorConfig
from site_backup.models import (
    ArticleContent,
    BookContent,
    CamelModel,
    ChapterContent,
    EmptyContent,
    Image,
    Link,
    PageMetadata,
    PageRecord,
    TemplateCategory,
    TemplateClasses,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _text(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return collapse_whitespace(tag.get_text(" "))


def _attr(tag: Optional[Tag], name: str) -> str:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    if tag is None:
        return ""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value).strip()


def _meta(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    return _attr(tag if isinstance(tag, Tag) else None, "content")


class ContentExtractor:
    """Extract metadata, links, images and template-specific content from a page.

    Every field is best-effort: a selector that matches nothing leaves its
    field empty and never stops the rest of the record from being built.
    """

    def __init__(self, config: ExtractionConfig) -> None:
        self.config = config
        self._selectors: SelectorConfig = config.selectors
        self._structured: dict[TemplateCategory, Callable[[BeautifulSoup], CamelModel]] = {
            TemplateCategory.ARTICLE: self._extract_article,
            TemplateCategory.BOOK: self._extract_book,
            TemplateCategory.CHAPTER: self._extract_chapter,
        }

    def extract(self, url: str, html: str, category: TemplateCategory) -> PageRecord:
        """Build the page record for ``url`` from its rendered ``html``."""
        soup = BeautifulSoup(html, "lxml")
        for tag in soup.find_all(self.config.strip_tags):
            tag.decompose()

        logger.debug("Extracting %s as %s", url, category.value)
        return PageRecord(
            url=url,
            template_category=category,
            metadata=self._extract_metadata(soup, url),
            template_classes=self._extract_template_classes(soup),
            navigation=self._extract_navigation(soup),
            images=self._extract_images(soup),
            structured_content=self.extract_structured(soup, category),
            raw_markup=html,
            clean_text=self._extract_clean_text(soup),
        )

    def extract_structured(self, soup: BeautifulSoup, category: TemplateCategory) -> CamelModel:
        """Run the extraction branch registered for ``category``."""
        handler = self._structured.get(category)
        if handler is None:
            return EmptyContent()
        return handler(soup)

    def _extract_metadata(self, soup: BeautifulSoup, url: str) -> PageMetadata:
        title = soup.find("title")
        canonical = soup.find("link", rel="canonical")
        return PageMetadata(
            url=url,
            title=title.get_text(strip=True) if title else "",
            description=_meta(soup, name="description"),
            og_title=_meta(soup, property="og:title"),
            og_image=_meta(soup, property="og:image"),
            canonical=_attr(canonical if isinstance(canonical, Tag) else None, "href"),
        )

    def _extract_template_classes(self, soup: BeautifulSoup) -> TemplateClasses:
        return TemplateClasses(
            body=_attr(soup.body, "class"),
            main=_attr(soup.find("main"), "class"),
        )

    def _extract_navigation(self, soup: BeautifulSoup) -> list[Link]:
        limit = self.config.navigation_limit
        links: list[Link] = []
        for a in soup.select(self._selectors.navigation):
            if len(links) >= limit:
                break
            href = _attr(a, "href")
            text = _text(a)
            if href and text:
                links.append(Link(href=href, text=text))
        return links

    def _extract_images(self, soup: BeautifulSoup) -> list[Image]:
        images: list[Image] = []
        for img in soup.find_all("img"):
            # Lazy-loaded images keep the real source in data-src
            src = _attr(img, "src") or _attr(img, "data-src")
            if src:
                images.append(Image(src=src, alt=_attr(img, "alt")))
        return images

    def _extract_clean_text(self, soup: BeautifulSoup) -> str:
        root = soup.body or soup
        return collapse_whitespace(root.get_text(" "))[: self.config.clean_text_limit]

    def _main_content_text(self, soup: BeautifulSoup) -> str:
        for selector in self._selectors.main_content:
            text = _text(soup.select_one(selector))
            if text:
                return text
        return ""

    def _extract_article(self, soup: BeautifulSoup) -> ArticleContent:
        s = self._selectors
        date = _attr(soup.select_one(s.date_time), "datetime") or _text(soup.select_one(s.date))
        return ArticleContent(
            headline=_text(soup.select_one(s.headline)),
            author=_text(soup.select_one(s.author)),
            date=date,
            categories=[_text(a) for a in soup.select(s.article_categories)],
            body=_text(soup.select_one(s.article)) or self._main_content_text(soup),
        )

    def _extract_book(self, soup: BeautifulSoup) -> BookContent:
        s = self._selectors
        return BookContent(
            book_name=_text(soup.select_one(s.headline)),
            description=_text(soup.select_one(s.book_description)),
            chapters=[Link(href=_attr(a, "href"), text=_text(a)) for a in soup.select(s.book_chapters)],
        )

    def _extract_chapter(self, soup: BeautifulSoup) -> ChapterContent:
        s = self._selectors
        return ChapterContent(
            chapter_title=_text(soup.select_one(s.headline)),
            book_reference=_text(soup.select_one(s.book_reference)),
            verse_content=_text(soup.select_one(s.verse_content)),
            previous_chapter=_attr(soup.select_one(s.previous_chapter), "href"),
            next_chapter=_attr(soup.select_one(s.next_chapter), "href"),
        )
