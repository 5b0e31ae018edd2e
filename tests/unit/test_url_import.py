"""Unit tests for pasted-link recognition."""

import pytest

from hitomi_source.utils.url_import import is_url_query, map_url_to_gallery_url


@pytest.mark.parametrize(
    ("query", "expected"),
    [("https://hitomi.la/x", True), ("http://hitomi.la/x", True), ("female:maid", False), ("hitomi.la/x", False)],
)
def test_is_url_query(query, expected):
    assert is_url_query(query) is expected


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://hitomi.la/manga/some-title-123.html", "https://hitomi.la/manga/some-title-123.html"),
        ("https://hitomi.la/reader/123.html#5", "https://hitomi.la/manga/123.html"),
        ("https://www.hitomi.la/reader/123.html", "https://hitomi.la/manga/123.html"),
        ("https://HITOMI.LA/Manga/abc-9.html?x=1", "https://hitomi.la/manga/abc-9.html"),
    ],
)
def test_gallery_links_map_to_canonical_url(url, expected):
    assert map_url_to_gallery_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/manga/123.html",
        "https://hitomi.la/",
        "https://hitomi.la/manga",
        "https://hitomi.la/artist/someone-all.html",
        "https://ltn.hitomi.la/galleryblock/123.html",
    ],
)
def test_other_links_are_not_galleries(url):
    assert map_url_to_gallery_url(url) is None


def test_custom_base_url():
    assert map_url_to_gallery_url("https://hitomi.la/reader/7.html", "http://mirror.test/") == "http://mirror.test/manga/7.html"
