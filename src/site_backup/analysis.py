"""Offline pass over the persisted ``data/`` tree.

Runs once all lanes have finished. Nothing here touches the network or
modifies the backup; it only reads the JSON page records back.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)


def _template_dirs(data_dir: Path) -> list[Path]:
    if not data_dir.is_dir():
        return []
    return sorted(p for p in data_dir.iterdir() if p.is_dir())


def _page_files(template_dir: Path) -> list[Path]:
    return sorted(p for p in template_dir.iterdir() if p.is_file() and p.suffix == ".json")


def _load(path: Path) -> dict[str, Any] | None:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.debug("Skipping unreadable page record %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.debug("Skipping %s: not a page record", path)
        return None
    return data


def iter_page_records(data_dir: Path) -> Iterator[dict[str, Any]]:
    """Yield every readable page record under ``data_dir``."""
    for template_dir in _template_dirs(data_dir):
        for path in _page_files(template_dir):
            data = _load(path)
            if data is not None:
                yield data


def analyze_templates(data_dir: Path, sample_size: int = 5) -> dict[str, Any]:
    """Summarise each template directory from a sample of its pages."""
    templates: dict[str, Any] = {}
    for template_dir in _template_dirs(data_dir):
        files = _page_files(template_dir)
        samples: list[dict[str, Any]] = []
        common_classes: dict[str, None] = {}

        for path in files[:sample_size]:
            data = _load(path)
            if data is None:
                continue
            metadata = data.get("metadata") or {}
            classes = data.get("templateClasses") or {}
            samples.append(
                {
                    "url": metadata.get("url", data.get("url", "")),
                    "title": metadata.get("title", ""),
                    "classes": classes,
                }
            )
            for cls in str(classes.get("body") or "").split():
                common_classes.setdefault(cls, None)

        templates[template_dir.name] = {
            "count": len(files),
            "samples": samples,
            "commonClasses": list(common_classes),
        }
    return templates


def _is_absolute(url: Any) -> bool:
    return isinstance(url, str) and url.startswith(("http://", "https://"))


def collect_asset_urls(data_dir: Path) -> list[str]:
    """Absolute image and Open Graph image URLs across all pages, deduplicated."""
    assets: dict[str, None] = {}
    for data in iter_page_records(data_dir):
        for image in data.get("images") or []:
            src = image.get("src") if isinstance(image, dict) else None
            if _is_absolute(src):
                assets.setdefault(src, None)
        og_image = (data.get("metadata") or {}).get("ogImage")
        if _is_absolute(og_image):
            assets.setdefault(og_image, None)
    return list(assets)
