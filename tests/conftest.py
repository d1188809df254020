from __future__ import annotations

from typing import Any, Dict, List

import pytest

from da_media.client import DAAdminClient
from da_media.errors import MediaIndexNotFoundError
from da_media.indexer import parse_media_document
from da_media.models import SiteKey, UsageRecord
from da_media.service import MediaService

SCENARIO_ROWS: List[Dict[str, Any]] = [
    {"url": "a.png?x=1", "doc": "p1", "alt": "", "type": "img > png", "name": "a.png"},
    {"url": "a.png", "doc": "p2", "alt": "cat", "type": "img > png", "name": "a.png"},
    {"url": "b.png", "doc": "", "alt": "null", "type": "img > png", "name": "b.png"},
]


class FakeAdminClient(DAAdminClient):
    """Serves canned media documents per site and counts fetches."""

    def __init__(self, documents: Dict[SiteKey, Any]) -> None:
        super().__init__()
        self.documents = documents
        self.fetch_count = 0
        self.probe_count = 0
        self.closed = False

    def fetch_media_index(self, site: SiteKey) -> List[UsageRecord]:
        self.fetch_count += 1
        if site not in self.documents:
            raise MediaIndexNotFoundError(f"Not found: {self.media_index_url(site)}", 404)
        return parse_media_document(self.documents[site])

    def media_index_exists(self, site: SiteKey) -> bool:
        self.probe_count += 1
        if site not in self.documents:
            raise MediaIndexNotFoundError(f"Not found: {self.media_index_url(site)}", 404)
        return True

    def close(self) -> None:
        self.closed = True
        super().close()


@pytest.fixture
def site() -> SiteKey:
    return SiteKey(org="acme", repo="web")


@pytest.fixture
def fake_client(site: SiteKey) -> FakeAdminClient:
    return FakeAdminClient({site: {"data": [dict(row) for row in SCENARIO_ROWS]}})


@pytest.fixture
def service(fake_client: FakeAdminClient) -> MediaService:
    return MediaService(fake_client)
