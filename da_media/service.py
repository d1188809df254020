"""Media index operations shared by the MCP server and the CLI."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from .cache import MediaCache
from .client import DAAdminClient
from .config import MEDIA_LIBRARY_URL
from .errors import DAAdminError
from .indexer import build_media_structures
from .models import MediaIndex, MediaStructures, SiteKey, UsageRecord
from .queries import SearchFilters, find_usage, list_media, media_stats, search_media
from .utils import display_path

logger = logging.getLogger("da_media")

NOT_FOUND_MESSAGE = "Media index not found"
NOT_LOADED_MESSAGE = "Media data not loaded"


def site_key(org: str, repo: str, path: Optional[str] = None) -> SiteKey:
    return SiteKey(org=org, repo=repo, path=path or "")


class MediaService:
    """Fetches, caches and queries media indexes for DA sites.

    Expected failures (missing document, unreachable API) come back as
    payloads carrying an ``error`` key; malformed documents raise.
    """

    def __init__(self, client: DAAdminClient, cache: Optional[MediaCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else MediaCache()

    def init_url(self, site: SiteKey) -> str:
        return f"{MEDIA_LIBRARY_URL}#{site.org}/{site.repo}{display_path(site.path)}"

    def error_response(self, site: SiteKey, error: Exception) -> Dict[str, Any]:
        return {
            "error": NOT_FOUND_MESSAGE,
            "initUrl": self.init_url(site),
            "debug": {
                "org": site.org,
                "repo": site.repo,
                "path": site.path or None,
                "url": self.client.media_index_url(site),
                "error": str(error) or type(error).__name__,
            },
        }

    async def _load(self, site: SiteKey) -> Tuple[MediaStructures, List[UsageRecord]]:
        records = await asyncio.to_thread(self.client.fetch_media_index, site)
        structures = build_media_structures(records)
        logger.info(
            "Indexed %d unique media items from %d references for %s",
            len(structures.unique_items),
            len(records),
            site,
        )
        return structures, records

    async def load_index(self, site: SiteKey) -> Tuple[MediaIndex, bool]:
        """Return the cached index for a site, fetching it on a miss."""
        return await self.cache.get_or_load(site, lambda: self._load(site))

    async def check_status(self, org: str, repo: str, path: Optional[str] = None) -> Dict[str, Any]:
        site = site_key(org, repo, path)
        try:
            await asyncio.to_thread(self.client.media_index_exists, site)
        except DAAdminError as exc:
            logger.warning("Media index status check failed for %s: %s", site, exc)
            return {"initialized": False, **self.error_response(site, exc)}
        return {"initialized": True}

    async def get_index(self, org: str, repo: str, path: Optional[str] = None) -> Dict[str, Any]:
        site = site_key(org, repo, path)
        try:
            entry, cached = await self.load_index(site)
        except DAAdminError as exc:
            logger.warning("Could not load media index for %s: %s", site, exc)
            return self.error_response(site, exc)
        return list_media(entry, cached)

    async def refresh_cache(self, org: str, repo: str, path: Optional[str] = None) -> Dict[str, Any]:
        self.cache.invalidate(site_key(org, repo, path))
        return await self.get_index(org, repo, path)

    async def search(
        self,
        org: str,
        repo: str,
        path: Optional[str] = None,
        filters: Optional[SearchFilters] = None,
    ) -> Dict[str, Any]:
        site = site_key(org, repo, path)
        try:
            entry, _ = await self.load_index(site)
        except DAAdminError as exc:
            return self.error_response(site, exc)
        return search_media(entry, filters or SearchFilters())

    async def get_stats(self, org: str, repo: str, path: Optional[str] = None) -> Dict[str, Any]:
        site = site_key(org, repo, path)
        try:
            entry, _ = await self.load_index(site)
        except DAAdminError as exc:
            return self.error_response(site, exc)
        return media_stats(entry)

    async def find_usage(
        self,
        org: str,
        repo: str,
        path: Optional[str] = None,
        media_url: Optional[str] = None,
        media_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        site = site_key(org, repo, path)
        try:
            await self.load_index(site)
        except DAAdminError as exc:
            return self.error_response(site, exc)
        # A refresh may have dropped the entry while this request was waiting.
        entry = self.cache.get(site)
        if entry is None:
            return {"error": NOT_LOADED_MESSAGE}
        return find_usage(entry, media_url=media_url, media_name=media_name)
