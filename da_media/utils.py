"""Utility helpers for URL normalization and site path handling."""

from __future__ import annotations

from typing import Optional

from .config import MEDIA_INDEX_PATH


def grouping_key(url: Optional[str]) -> str:
    """Collapse query-string variants of a media URL into one lower-case key."""
    if not url:
        return ""
    return url.split("?", 1)[0].lower()


def display_path(path: Optional[str]) -> str:
    """Return the site path with exactly one leading slash, or an empty string."""
    if not path:
        return ""
    return "/" + (path[1:] if path.startswith("/") else path)


def media_index_path(path: Optional[str]) -> str:
    """Location of the media index document, below the site folder when given."""
    return f"{display_path(path)}{MEDIA_INDEX_PATH}"
