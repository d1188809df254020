"""Data models used throughout the media index pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import MediaIndexFormatError

ALT_PLACEHOLDER = "null"

# JSON attribute name -> dataclass field name for the known record fields.
_KNOWN_FIELDS = {
    "url": "url",
    "name": "name",
    "doc": "doc",
    "alt": "alt",
    "type": "type",
    "firstUsedAt": "first_used_at",
    "lastUsedAt": "last_used_at",
    "hash": "hash",
}


@dataclass(frozen=True)
class SiteKey:
    """Identity of a site: organization, repository and optional sub-path."""

    org: str
    repo: str
    path: str = ""

    def __str__(self) -> str:
        return f"{self.org}/{self.repo}/{self.path}"


@dataclass
class UsageRecord:
    """One row of the media index: a single use of a media item on a page."""

    url: Optional[str] = None
    name: Optional[str] = None
    doc: Optional[str] = None
    alt: Optional[str] = None
    type: Optional[str] = None
    first_used_at: Any = None
    last_used_at: Any = None
    hash: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    # Attribute names in the order they appeared in the source row.
    field_order: Tuple[str, ...] = field(default=(), repr=False)

    @classmethod
    def from_raw(cls, raw: Any) -> "UsageRecord":
        """Split a raw JSON object into known fields and passthrough attributes."""
        if not isinstance(raw, Mapping):
            raise MediaIndexFormatError(
                f"Media index rows must be objects, got {type(raw).__name__}"
            )
        known: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in raw.items():
            if key in _KNOWN_FIELDS:
                known[_KNOWN_FIELDS[key]] = value
            else:
                extra[key] = value
        return cls(extra=extra, field_order=tuple(raw.keys()), **known)

    def to_dict(self) -> Dict[str, Any]:
        """Render the record as it appeared in the source, explicit nulls included."""
        order = self.field_order or (
            tuple(name for name, attr in _KNOWN_FIELDS.items() if getattr(self, attr) is not None)
            + tuple(self.extra)
        )
        payload: Dict[str, Any] = {}
        for json_name in order:
            attr = _KNOWN_FIELDS.get(json_name)
            payload[json_name] = getattr(self, attr) if attr else self.extra[json_name]
        return payload

    def detail(self) -> "UsageDetail":
        return UsageDetail(
            doc=self.doc,
            alt=self.alt,
            type=self.type,
            first_used_at=self.first_used_at,
            last_used_at=self.last_used_at,
            hash=self.hash,
        )

    @property
    def is_unused(self) -> bool:
        return not self.doc

    @property
    def is_missing_alt(self) -> bool:
        return not self.alt or self.alt == ALT_PLACEHOLDER


@dataclass(frozen=True)
class UsageDetail:
    """Where and how a media item is used on one page."""

    doc: Optional[str]
    alt: Optional[str]
    type: Optional[str]
    first_used_at: Any
    last_used_at: Any
    hash: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "doc": self.doc,
            "alt": self.alt,
            "type": self.type,
            "firstUsedAt": self.first_used_at,
            "lastUsedAt": self.last_used_at,
            "hash": self.hash,
        }


@dataclass
class MediaItem:
    """Unique media item: the first-seen record plus how often it is used."""

    record: UsageRecord
    usage_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        payload = self.record.to_dict()
        payload["usageCount"] = self.usage_count
        return payload


@dataclass
class MediaStructures:
    """Deduplicated catalogue and reverse usage index built from raw records."""

    unique_items: List[MediaItem]
    usage_index: Dict[str, List[UsageDetail]]


@dataclass(frozen=True)
class MediaIndex:
    """Cached state for one site."""

    unique_items: List[MediaItem]
    usage_index: Dict[str, List[UsageDetail]]
    raw_data: List[UsageRecord]
    fetched_at: int
