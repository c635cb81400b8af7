"""Tests for the classifier and path sanitizer."""

import re

import pytest

from site_backup.classifier import TemplateClassifier, url_path
from site_backup.config import TemplateRule, default_template_rules
from site_backup.models import TemplateCategory
from site_backup.paths import output_name, sanitize_path


@pytest.fixture
def classifier() -> TemplateClassifier:
    return TemplateClassifier(default_template_rules())


class TestTemplateClassifier:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/", TemplateCategory.HOME),
            ("/articulos/fe", TemplateCategory.ARTICLE),
            ("/libro/genesis", TemplateCategory.BOOK),
            ("/capitulos/genesis-1", TemplateCategory.CHAPTER),
            ("/categoria/doctrina", TemplateCategory.CATEGORY),
            ("/conceptos/gracia", TemplateCategory.CONCEPT),
            ("/autores/juan", TemplateCategory.AUTHOR),
            ("/sobre-nosotros", TemplateCategory.STATIC),
            ("/articulos-recientes", TemplateCategory.STATIC),
            ("/unknownpath", TemplateCategory.UNKNOWN),
            ("", TemplateCategory.UNKNOWN),
        ],
    )
    def test_default_rules(self, classifier: TemplateClassifier, path: str, expected: TemplateCategory) -> None:
        assert classifier.classify(path) == expected

    def test_static_pattern_is_exact(self, classifier: TemplateClassifier) -> None:
        assert classifier.classify("/sobre-nosotros/equipo") == TemplateCategory.UNKNOWN

    def test_deterministic(self, classifier: TemplateClassifier) -> None:
        for path in ["/", "/articulos/x", "/nada", "/libro/"]:
            assert classifier.classify(path) == classifier.classify(path)

    def test_first_matching_rule_wins(self) -> None:
        article = TemplateRule(category=TemplateCategory.ARTICLE, pattern=r"^/articulos/")
        catch_all = TemplateRule(category=TemplateCategory.STATIC, pattern=r"^/[a-z]+/")

        assert TemplateClassifier([article, catch_all]).classify("/articulos/x") == TemplateCategory.ARTICLE
        assert TemplateClassifier([catch_all, article]).classify("/articulos/x") == TemplateCategory.STATIC

    def test_classify_url_uses_path_only(self, classifier: TemplateClassifier) -> None:
        assert classifier.classify_url("https://www.example.com/libro/genesis?x=1#top") == TemplateCategory.BOOK
        assert classifier.classify_url("https://www.example.com") == TemplateCategory.HOME

    def test_rules_are_copied(self) -> None:
        rules = default_template_rules()
        classifier = TemplateClassifier(rules)
        rules.clear()
        assert classifier.classify("/libro/genesis") == TemplateCategory.BOOK


def test_url_path_defaults_to_root() -> None:
    assert url_path("https://www.example.com") == "/"
    assert url_path("https://www.example.com/a/b") == "/a/b"


class TestSanitizer:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/", "index"),
            ("", "index"),
            ("/articulos/fe", "articulos/fe"),
            ("/capitulos/génesis 1", "capitulos/g_nesis_1"),
            ("/a.b?c=d", "a_b_c_d"),
            ("//double", "/double"),
        ],
    )
    def test_sanitize(self, path: str, expected: str) -> None:
        assert sanitize_path(path) == expected

    @pytest.mark.parametrize("path", ["/", "/x y/ñ", "/articulos/fe?ref=1", "/%20/..", "/libro/genesis/"])
    def test_only_safe_characters(self, path: str) -> None:
        result = sanitize_path(path)
        assert result == sanitize_path(path)
        assert re.fullmatch(r"[A-Za-z0-9_\-/]+", result)

    def test_output_name_flattens_slashes(self) -> None:
        assert output_name("/capitulos/genesis-1") == "capitulos_genesis-1"
        assert output_name("/") == "index"

    def test_distinct_paths_can_collide(self) -> None:
        assert output_name("/articulos/a.b") == output_name("/articulos/a_b")
