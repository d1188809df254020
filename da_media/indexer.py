"""Build the deduplicated catalogue and usage index from raw media records."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from .errors import MediaIndexFormatError
from .models import MediaItem, MediaStructures, UsageDetail, UsageRecord
from .utils import grouping_key

logger = logging.getLogger("da_media")


def parse_media_document(payload: Any) -> List[UsageRecord]:
    """Turn a decoded media.json payload into usage records.

    The admin API wraps sheet rows in ``{"data": [...]}``; a bare list is
    accepted as well. Anything else is a contract violation and raises.
    """
    rows = payload
    if isinstance(payload, Mapping) and "data" in payload:
        rows = payload["data"]
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise MediaIndexFormatError(
            f"Expected a list of media records, got {type(rows).__name__}"
        )
    return [UsageRecord.from_raw(row) for row in rows]


def build_media_structures(records: Iterable[UsageRecord]) -> MediaStructures:
    """Group records by URL, counting uses and keeping every usage in order."""
    items: Dict[str, MediaItem] = {}
    usage_index: Dict[str, List[UsageDetail]] = {}
    skipped = 0

    for record in records:
        if not record.url:
            skipped += 1
            continue
        key = grouping_key(record.url)

        item = items.get(key)
        if item is None:
            item = items[key] = MediaItem(record=record)
            usage_index[key] = []
        item.usage_count += 1
        usage_index[key].append(record.detail())

    if skipped:
        logger.debug("Skipped %d media records without a URL", skipped)
    return MediaStructures(unique_items=list(items.values()), usage_index=usage_index)
