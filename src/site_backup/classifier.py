"""Classify URL paths into template categories."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import urlparse

from site_backup.config import TemplateRule
from site_backup.models import TemplateCategory


class TemplateClassifier:
    """Map a URL path to the first template rule that matches it.

    Rules are evaluated in the order given; broad patterns must come after
    the specific ones they would otherwise shadow. Paths matching no rule are
    ``unknown``.
    """

    def __init__(self, rules: Sequence[TemplateRule]) -> None:
        self._rules: tuple[tuple[TemplateCategory, re.Pattern[str]], ...] = tuple(
            (rule.category, re.compile(rule.pattern)) for rule in rules
        )

    def classify(self, path: str) -> TemplateCategory:
        for category, pattern in self._rules:
            if pattern.search(path):
                return category
        return TemplateCategory.UNKNOWN

    def classify_url(self, url: str) -> TemplateCategory:
        return self.classify(url_path(url))


def url_path(url: str) -> str:
    """Path component of ``url``; the site root for an empty path."""
    return urlparse(url).path or "/"
