"""HTTP access to the Document Authoring admin API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import DAAdminConfig
from .errors import DAAdminError, MediaIndexNotFoundError
from .indexer import parse_media_document
from .models import SiteKey, UsageRecord
from .utils import media_index_path

logger = logging.getLogger("da_media")


def format_url(admin_url: str, api: str, org: str, repo: str, path: str, ext: str) -> str:
    """Build ``<admin>/<api>/<org>/<repo><path>.<ext>``."""
    return f"{admin_url}/{api}/{org}/{repo}{path}.{ext}"


class DAAdminClient:
    """Thin wrapper around a requests session for media index documents."""

    def __init__(
        self,
        config: Optional[DAAdminConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or DAAdminConfig()
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def media_index_url(self, site: SiteKey) -> str:
        return format_url(
            self.config.admin_url,
            "source",
            site.org,
            site.repo,
            media_index_path(site.path),
            "json",
        )

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            resp = self._session.get(
                url,
                headers=self._headers(),
                timeout=self.config.timeout,
                stream=stream,
            )
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise DAAdminError(str(exc)) from exc

        if resp.status_code == 404:
            resp.close()
            raise MediaIndexNotFoundError(f"Not found: {url}", status_code=404)
        try:
            resp.raise_for_status()
        except requests.HTTPError as exc:
            resp.close()
            logger.warning("Admin API returned %s for %s", resp.status_code, url)
            raise DAAdminError(str(exc), status_code=resp.status_code) from exc
        return resp

    def fetch_json(self, url: str) -> Any:
        resp = self._get(url)
        try:
            return resp.json()
        except ValueError as exc:
            raise DAAdminError(f"Invalid JSON from {url}: {exc}") from exc

    def fetch_media_index(self, site: SiteKey) -> List[UsageRecord]:
        """Download and parse the media index document for a site."""
        url = self.media_index_url(site)
        logger.info("Fetching media index %s", url)
        records = parse_media_document(self.fetch_json(url))
        logger.debug("Fetched %d media records for %s", len(records), site)
        return records

    def media_index_exists(self, site: SiteKey) -> bool:
        """Probe the media index without downloading its body.

        Raises ``MediaIndexNotFoundError`` or ``DAAdminError`` on failure.
        """
        resp = self._get(self.media_index_url(site), stream=True)
        resp.close()
        return True

    def close(self) -> None:
        self._session.close()
