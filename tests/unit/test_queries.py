from __future__ import annotations

from itertools import product

from da_media.indexer import build_media_structures
from da_media.models import MediaIndex, UsageRecord
from da_media.queries import (
    SearchFilters,
    find_usage,
    list_media,
    media_stats,
    resolve_media_key,
    search_media,
)

ROWS = [
    {"url": "/media/hero.png?w=750", "name": "hero.png", "doc": "/index", "alt": "Hero banner", "type": "img > png"},
    {"url": "/media/hero.png", "name": "hero.png", "doc": "/about", "alt": "", "type": "img > png"},
    {"url": "/media/logo.svg", "name": "logo.svg", "doc": "", "alt": "null", "type": "img > svg"},
    {"url": "/media/clip.mp4", "name": "clip.mp4", "doc": "/index", "type": "video > mp4"},
    {"url": "/fragments/footer", "name": "footer", "doc": "/index", "alt": "", "type": "fragment"},
    {"url": "/media/unused.jpg", "name": "Unused.JPG", "alt": "Old team photo", "type": "img > jpg"},
    {"url": "", "doc": "/ghost", "type": "img > png"},
]


def _entry(rows=ROWS) -> MediaIndex:
    records = [UsageRecord.from_raw(row) for row in rows]
    structures = build_media_structures(records)
    return MediaIndex(
        unique_items=structures.unique_items,
        usage_index=structures.usage_index,
        raw_data=records,
        fetched_at=1700000000000,
    )


def _urls(result: dict) -> list[str]:
    return [item["url"] for item in result["results"]]


def test_list_media_payload() -> None:
    result = list_media(_entry(), cached=True)

    assert result["total"] == 5
    assert len(result["data"]) == 5
    assert result["fetchedAt"] == 1700000000000
    assert result["cached"] is True
    assert result["data"][0]["usageCount"] == 2


def test_search_without_filters_returns_everything() -> None:
    result = search_media(_entry(), SearchFilters())

    assert result["count"] == 5


def test_search_type_is_case_sensitive_substring() -> None:
    entry = _entry()

    assert _urls(search_media(entry, SearchFilters(type="img"))) == [
        "/media/hero.png?w=750",
        "/media/logo.svg",
        "/media/unused.jpg",
    ]
    assert search_media(entry, SearchFilters(type="IMG"))["count"] == 0


def test_search_doc_matches_first_seen_document_only() -> None:
    entry = _entry()

    assert _urls(search_media(entry, SearchFilters(doc="/index"))) == [
        "/media/hero.png?w=750",
        "/media/clip.mp4",
        "/fragments/footer",
    ]
    assert search_media(entry, SearchFilters(doc="/about"))["count"] == 0


def test_search_name_and_alt_are_case_insensitive() -> None:
    entry = _entry()

    assert _urls(search_media(entry, SearchFilters(name="unused.jpg"))) == ["/media/unused.jpg"]
    assert _urls(search_media(entry, SearchFilters(alt="TEAM"))) == ["/media/unused.jpg"]
    assert _urls(search_media(entry, SearchFilters(alt="hero"))) == ["/media/hero.png?w=750"]


def test_search_unused_and_missing_alt() -> None:
    entry = _entry()

    assert _urls(search_media(entry, SearchFilters(unused_only=True))) == [
        "/media/logo.svg",
        "/media/unused.jpg",
    ]
    assert _urls(search_media(entry, SearchFilters(missing_alt=True))) == [
        "/media/logo.svg",
        "/media/clip.mp4",
        "/fragments/footer",
    ]


def test_combined_filters_are_subset_of_each() -> None:
    entry = _entry()
    for unused, missing in product((False, True), repeat=2):
        both = set(_urls(search_media(entry, SearchFilters(unused_only=unused, missing_alt=missing))))
        only_unused = set(_urls(search_media(entry, SearchFilters(unused_only=unused))))
        only_missing = set(_urls(search_media(entry, SearchFilters(missing_alt=missing))))
        assert both <= only_unused
        assert both <= only_missing
    both = _urls(search_media(entry, SearchFilters(unused_only=True, missing_alt=True)))
    assert both == ["/media/logo.svg"]


def test_stats_scenario() -> None:
    entry = _entry(
        [
            {"url": "a.png?x=1", "doc": "p1", "alt": ""},
            {"url": "a.png", "doc": "p2", "alt": "cat"},
            {"url": "b.png", "doc": "", "alt": "null"},
        ]
    )

    stats = media_stats(entry)

    assert stats["uniqueItems"] == 2
    assert stats["totalReferences"] == 3
    assert stats["unused"] == 1
    assert stats["altText"] == {"filled": 1, "decorative": 1, "notFilled": 1}
    assert stats["byType"] == {"unknown": 3}


def test_stats_totals_are_consistent() -> None:
    stats = media_stats(_entry())

    assert stats["totalReferences"] == 6
    assert sum(stats["byType"].values()) == stats["totalReferences"]
    assert sum(stats["altText"].values()) == stats["totalReferences"]
    assert stats["byType"]["img > png"] == 2
    assert stats["unused"] == 2


def test_find_usage_by_url_ignores_query_and_case() -> None:
    result = find_usage(_entry(), media_url="/MEDIA/hero.png?w=2000")

    assert result["mediaItem"]["url"] == "/media/hero.png?w=750"
    assert result["usageCount"] == 2
    assert result["documents"] == ["/index", "/about"]
    assert [usage["alt"] for usage in result["allUsages"]] == ["Hero banner", ""]


def test_find_usage_by_name_substring() -> None:
    result = find_usage(_entry(), media_name="LOGO")

    assert result["mediaItem"]["url"] == "/media/logo.svg"
    assert result["usageCount"] == 1
    assert result["documents"] == []


def test_find_usage_documents_are_deduplicated_in_order() -> None:
    entry = _entry(
        [
            {"url": "a.png", "doc": "/b"},
            {"url": "a.png", "doc": "/a"},
            {"url": "a.png", "doc": "/b"},
            {"url": "a.png", "doc": ""},
        ]
    )

    result = find_usage(entry, media_url="a.png")

    assert result["documents"] == ["/b", "/a"]
    assert result["usageCount"] == 4
    assert len(result["allUsages"]) == 4


def test_find_usage_not_found() -> None:
    expected = {"mediaItem": None, "usageCount": 0, "documents": [], "allUsages": []}

    assert find_usage(_entry(), media_name="does-not-exist") == expected
    assert find_usage(_entry(), media_url="/media/missing.png") == expected
    assert find_usage(_entry()) == expected


def test_resolve_prefers_url_over_name() -> None:
    key = resolve_media_key(_entry(), media_url="/media/clip.mp4", media_name="hero")

    assert key == "/media/clip.mp4"
