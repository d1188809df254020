"""Listing, search, statistics and usage lookups over a cached media index."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import ALT_PLACEHOLDER, MediaIndex, MediaItem
from .utils import grouping_key

UNKNOWN_TYPE = "unknown"


@dataclass
class SearchFilters:
    """Optional constraints combined with AND; None means no constraint."""

    type: Optional[str] = None
    doc: Optional[str] = None
    name: Optional[str] = None
    alt: Optional[str] = None
    unused_only: bool = False
    missing_alt: bool = False


def list_media(entry: MediaIndex, cached: bool) -> Dict[str, Any]:
    return {
        "data": [item.to_dict() for item in entry.unique_items],
        "total": len(entry.unique_items),
        "fetchedAt": entry.fetched_at,
        "cached": cached,
    }


def _matches(item: MediaItem, filters: SearchFilters) -> bool:
    # doc and alt come from the first record seen for the item, not every usage.
    record = item.record
    if filters.type and (not record.type or filters.type not in record.type):
        return False
    if filters.doc and record.doc != filters.doc:
        return False
    if filters.name:
        if not record.name or filters.name.lower() not in record.name.lower():
            return False
    if filters.alt:
        if not record.alt or filters.alt.lower() not in record.alt.lower():
            return False
    if filters.unused_only and not record.is_unused:
        return False
    if filters.missing_alt and not record.is_missing_alt:
        return False
    return True


def search_media(entry: MediaIndex, filters: SearchFilters) -> Dict[str, Any]:
    results = [item.to_dict() for item in entry.unique_items if _matches(item, filters)]
    return {"results": results, "count": len(results)}


def media_stats(entry: MediaIndex) -> Dict[str, Any]:
    """Aggregate counts over every reference, not just unique items."""
    by_type: Counter = Counter()
    unused = 0
    alt_text = {"filled": 0, "decorative": 0, "notFilled": 0}
    total = 0

    for record in entry.raw_data:
        if not record.url:
            continue
        total += 1
        by_type[record.type or UNKNOWN_TYPE] += 1
        if record.is_unused:
            unused += 1
        if record.alt == ALT_PLACEHOLDER:
            alt_text["notFilled"] += 1
        elif not record.alt:
            alt_text["decorative"] += 1
        else:
            alt_text["filled"] += 1

    return {
        "uniqueItems": len(entry.unique_items),
        "totalReferences": total,
        "byType": dict(by_type),
        "unused": unused,
        "altText": alt_text,
    }


def resolve_media_key(
    entry: MediaIndex,
    media_url: Optional[str] = None,
    media_name: Optional[str] = None,
) -> Optional[str]:
    """Find the grouping key for a URL, or the first key containing a name.

    When several keys contain ``media_name`` the first in document order wins;
    callers should pass a URL when they need an exact item.
    """
    if media_url:
        key = grouping_key(media_url)
        return key if key in entry.usage_index else None
    if media_name:
        needle = media_name.lower()
        for key in entry.usage_index:
            if needle in key:
                return key
    return None


def find_usage(
    entry: MediaIndex,
    media_url: Optional[str] = None,
    media_name: Optional[str] = None,
) -> Dict[str, Any]:
    key = resolve_media_key(entry, media_url, media_name)
    if key is None:
        return {"mediaItem": None, "usageCount": 0, "documents": [], "allUsages": []}

    usages = entry.usage_index[key]
    documents: List[str] = list(dict.fromkeys(usage.doc for usage in usages if usage.doc))
    item = next(
        (item for item in entry.unique_items if grouping_key(item.record.url) == key),
        None,
    )
    return {
        "mediaItem": item.to_dict() if item else None,
        "usageCount": len(usages),
        "documents": documents,
        "allUsages": [usage.to_dict() for usage in usages],
    }
