"""Exceptions raised while fetching and indexing media documents."""

from __future__ import annotations

from typing import Optional


class DAMediaError(Exception):
    """Base class for media index failures."""


class DAAdminError(DAMediaError):
    """The admin API request failed (network, auth, HTTP status or bad JSON)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MediaIndexNotFoundError(DAAdminError):
    """The media index document does not exist for the requested site."""


class MediaIndexFormatError(DAMediaError):
    """The media index document does not have the expected shape."""
