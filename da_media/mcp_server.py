"""MCP server exposing DA media index tools."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .client import DAAdminClient
from .config import DAAdminConfig
from .queries import SearchFilters
from .service import MediaService

logger = logging.getLogger("da_media.mcp")

INSTRUCTIONS = """
Tools for looking up media and fragment references on https://da.live sites
through the DA admin API. org is an organization name, repo is a repository
name and path is an optional site folder for org/root/site structures.
References are stored in .da/mediaindex/media.json and include all images,
videos, documents and fragments used across pages. Results are cached per
site; use da_media_refresh_cache after media has changed.
"""


def create_server(service: MediaService) -> FastMCP:
    """Build a FastMCP server whose tools share ``service`` and its cache."""
    mcp = FastMCP(name="da-media", instructions=INSTRUCTIONS)

    @mcp.tool()
    async def da_media_check_status(
        org: str,
        repo: str,
        path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Check if media index exists on a site. Returns initialization URL if not found."""
        return await service.check_status(org, repo, path)

    @mcp.tool()
    async def da_media_refresh_cache(
        org: str,
        repo: str,
        path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Refresh the media data cache by fetching the latest media.json. Use when media has been updated."""
        return await service.refresh_cache(org, repo, path)

    @mcp.tool()
    async def da_media_get_index(
        org: str,
        repo: str,
        path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Get the complete media index (media.json) for a site. Returns all media references with timestamp."""
        return await service.get_index(org, repo, path)

    @mcp.tool()
    async def da_media_search(
        org: str,
        repo: str,
        path: Optional[str] = None,
        type: Optional[str] = None,
        doc: Optional[str] = None,
        name: Optional[str] = None,
        alt: Optional[str] = None,
        unusedOnly: bool = False,  # noqa: N803 - published argument name
        missingAlt: bool = False,  # noqa: N803
    ) -> Dict[str, Any]:
        """Search and filter media items by type, document, name, alt text, unused status, or missing alt text."""
        filters = SearchFilters(
            type=type,
            doc=doc,
            name=name,
            alt=alt,
            unused_only=unusedOnly,
            missing_alt=missingAlt,
        )
        return await service.search(org, repo, path, filters)

    @mcp.tool()
    async def da_media_get_stats(
        org: str,
        repo: str,
        path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Get media usage statistics: totals, breakdown by type, unused count, and alt text status."""
        return await service.get_stats(org, repo, path)

    @mcp.tool()
    async def da_media_find_usage(
        org: str,
        repo: str,
        path: Optional[str] = None,
        mediaUrl: Optional[str] = None,  # noqa: N803
        mediaName: Optional[str] = None,  # noqa: N803
    ) -> Dict[str, Any]:
        """Find all documents using a specific media item by URL or name."""
        return await service.find_usage(
            org, repo, path, media_url=mediaUrl, media_name=mediaName
        )

    return mcp


def main(config: Optional[DAAdminConfig] = None) -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    config = config or DAAdminConfig.from_env()
    logger.debug("Serving media index tools for %s", config.admin_url)
    client = DAAdminClient(config)
    try:
        create_server(MediaService(client)).run()
    finally:
        client.close()


if __name__ == "__main__":
    main()
