"""In-memory per-site cache of built media indexes."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .models import MediaIndex, MediaStructures, SiteKey, UsageRecord

logger = logging.getLogger("da_media")

Loader = Callable[[], Awaitable[Tuple[MediaStructures, List[UsageRecord]]]]


def now_millis() -> int:
    return int(time.time() * 1000)


def _make_entry(
    structures: MediaStructures,
    raw_data: List[UsageRecord],
    fetched_at: Optional[int] = None,
) -> MediaIndex:
    return MediaIndex(
        unique_items=structures.unique_items,
        usage_index=structures.usage_index,
        raw_data=raw_data,
        fetched_at=now_millis() if fetched_at is None else fetched_at,
    )


class MediaCache:
    """Holds the latest media index per site until it is invalidated.

    Entries never expire and the cache is unbounded; a site stays cached
    until ``invalidate`` is called or the process exits. Concurrent misses
    for the same site share a single in-flight load.
    """

    def __init__(self) -> None:
        self._entries: Dict[SiteKey, MediaIndex] = {}
        self._pending: Dict[SiteKey, "asyncio.Future[MediaIndex]"] = {}

    def __contains__(self, key: SiteKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: SiteKey) -> Optional[MediaIndex]:
        return self._entries.get(key)

    def put(
        self,
        key: SiteKey,
        structures: MediaStructures,
        raw_data: List[UsageRecord],
        fetched_at: Optional[int] = None,
    ) -> MediaIndex:
        """Store a freshly built index, replacing any previous entry for the site."""
        entry = _make_entry(structures, raw_data, fetched_at)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: SiteKey) -> None:
        if self._entries.pop(key, None) is not None:
            logger.info("Invalidated media cache for %s", key)
        self._pending.pop(key, None)

    async def get_or_load(self, key: SiteKey, loader: Loader) -> Tuple[MediaIndex, bool]:
        """Return ``(entry, cached)``, running ``loader`` only on a miss.

        ``cached`` is False only for the caller whose miss triggered the load.
        """
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug("Media cache hit for %s", key)
            return entry, True

        pending = self._pending.get(key)
        if pending is not None:
            logger.debug("Joining in-flight media index load for %s", key)
            return await pending, True

        logger.debug("Media cache miss for %s", key)
        future: "asyncio.Future[MediaIndex]" = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            structures, raw_data = await loader()
            if self._pending.get(key) is future:
                entry = self.put(key, structures, raw_data)
            else:
                # Invalidated while loading; a newer load owns the cache slot.
                logger.debug("Discarding superseded media index load for %s", key)
                entry = _make_entry(structures, raw_data)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unjoined failure is not reported as unhandled.
            future.exception()
            raise
        else:
            future.set_result(entry)
        finally:
            if self._pending.get(key) is future:
                del self._pending[key]
        return entry, False
