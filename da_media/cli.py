"""Command-line entry point for querying DA media indexes."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Any, Dict, Optional, Sequence

from .client import DAAdminClient
from .config import DAAdminConfig
from .queries import SearchFilters
from .service import MediaService

logger = logging.getLogger("da_media.cli")


def _add_site_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("org", help="Organization name")
    parser.add_argument("repo", help="Repository name")
    parser.add_argument(
        "--path",
        default=None,
        help="Optional site folder for hierarchical org/root/site structures",
    )


def _add_search_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--type", default=None, help='Media type, e.g. "png" or "img > png"')
    parser.add_argument("--doc", default=None, help="Exact document path")
    parser.add_argument("--name", default=None, help="Media name (partial match)")
    parser.add_argument("--alt", default=None, help="Alt text (partial match)")
    parser.add_argument(
        "--unused-only",
        action="store_true",
        help="Only media with no document reference",
    )
    parser.add_argument(
        "--missing-alt",
        action="store_true",
        help="Only media with missing or empty alt text",
    )


def _add_usage_arguments(parser: argparse.ArgumentParser) -> None:
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--url", dest="media_url", default=None, help="Media URL to look up")
    target.add_argument("--name", dest="media_name", default=None, help="Media name to look up")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inspect the media index (.da/mediaindex/media.json) of DA sites.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--admin-url",
        default=None,
        help="Override the admin API base URL (default: DA_ADMIN_URL or https://admin.da.live)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("status", "Check whether a site has a media index"),
        ("index", "Print every unique media item"),
        ("refresh", "Fetch the media index, bypassing the cache"),
        ("stats", "Print usage statistics"),
    ):
        _add_site_arguments(subparsers.add_parser(command, help=help_text))

    search_parser = subparsers.add_parser("search", help="Filter media items")
    _add_site_arguments(search_parser)
    _add_search_arguments(search_parser)

    usage_parser = subparsers.add_parser("usage", help="List documents using a media item")
    _add_site_arguments(usage_parser)
    _add_usage_arguments(usage_parser)

    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> DAAdminConfig:
    config = DAAdminConfig.from_env()
    if args.admin_url:
        config.admin_url = args.admin_url.rstrip("/")
    if args.timeout is not None:
        config.timeout = args.timeout
    return config


async def _dispatch(service: MediaService, args: argparse.Namespace) -> Dict[str, Any]:
    site = (args.org, args.repo, args.path)
    if args.command == "status":
        return await service.check_status(*site)
    if args.command == "index":
        return await service.get_index(*site)
    if args.command == "refresh":
        return await service.refresh_cache(*site)
    if args.command == "stats":
        return await service.get_stats(*site)
    if args.command == "search":
        filters = SearchFilters(
            type=args.type,
            doc=args.doc,
            name=args.name,
            alt=args.alt,
            unused_only=args.unused_only,
            missing_alt=args.missing_alt,
        )
        return await service.search(*site, filters=filters)
    return await service.find_usage(
        *site, media_url=args.media_url, media_name=args.media_name
    )


def run(args: argparse.Namespace, service: Optional[MediaService] = None) -> int:
    """Execute one query command, print its JSON payload and return an exit code."""
    owned = service is None
    if service is None:
        service = MediaService(DAAdminClient(_build_config(args)))
    start = time.perf_counter()
    try:
        result = asyncio.run(_dispatch(service, args))
    finally:
        if owned:
            service.client.close()
    logger.debug("%s finished in %.2fs", args.command, time.perf_counter() - start)

    sys.stdout.write(json.dumps(result, indent=2) + "\n")
    sys.stdout.flush()
    return 1 if "error" in result else 0


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    if args.command == "serve":
        from .mcp_server import main as serve

        serve(_build_config(args))
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
