"""Turn URL paths into filesystem-safe names."""

from __future__ import annotations

import re

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-/]")


def sanitize_path(path: str) -> str:
    """Replace unsafe characters with ``_`` and drop one leading slash.

    The root path (or an empty one) becomes ``index``. Distinct paths can
    sanitize to the same value, e.g. ``/a.b`` and ``/a_b``.
    """
    safe = _UNSAFE_CHARS.sub("_", path)
    if safe.startswith("/"):
        safe = safe[1:]
    return safe or "index"


def output_name(path: str) -> str:
    """File stem for a page: the sanitized path with ``/`` flattened to ``_``."""
    return sanitize_path(path).replace("/", "_")
