"""Configuration objects and constants for the media index tools."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ADMIN_URL = "https://admin.da.live"
DEFAULT_TIMEOUT = 30.0
MEDIA_INDEX_PATH = "/.da/mediaindex/media"
MEDIA_LIBRARY_URL = "https://main--da-live--adobe.aem.live/apps/media-library?nx=media"


@dataclass
class DAAdminConfig:
    """Settings that control how the admin API is reached."""

    admin_url: str = DEFAULT_ADMIN_URL
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "DAAdminConfig":
        """Build a config from DA_ADMIN_* environment variables."""
        timeout = os.getenv("DA_ADMIN_TIMEOUT")
        return cls(
            admin_url=(os.getenv("DA_ADMIN_URL") or DEFAULT_ADMIN_URL).rstrip("/"),
            token=os.getenv("DA_ADMIN_API_TOKEN") or None,
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )
