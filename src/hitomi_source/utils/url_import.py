"""Map externally shared links onto canonical gallery URLs."""

from __future__ import annotations

from urllib.parse import urlparse


MATCHING_HOSTS = frozenset({"hitomi.la", "www.hitomi.la"})
GALLERY_SEGMENTS = frozenset({"manga", "reader"})


def is_url_query(query: str) -> bool:
    return query.startswith(("http://", "https://"))


def map_url_to_gallery_url(url: str, base_url: str = "https://hitomi.la") -> str | None:
    """Return the canonical ``/manga/<slug>.html`` URL, or None for unknown shapes.

    ``https://hitomi.la/reader/123.html#2`` -> ``https://hitomi.la/manga/123.html``
    """
    parsed = urlparse(url)
    if (parsed.hostname or "").lower() not in MATCHING_HOSTS:
        return None

    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 2 or segments[0].lower() not in GALLERY_SEGMENTS:
        return None

    slug = segments[1].split(".", 1)[0]
    if not slug:
        return None
    return f"{base_url.rstrip('/')}/manga/{slug}.html"
