"""Small BeautifulSoup helpers shared by the block and metadata parsers."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def element_text(element: Tag) -> str:
    """Visible text with runs of whitespace collapsed to single spaces."""
    return " ".join(element.get_text(" ").split())


def attr(element: Tag | None, name: str) -> str:
    """Attribute value as a string ("" when absent)."""
    if element is None:
        return ""
    value = element.get(name)
    # BeautifulSoup can return list for attribute values, ensure it's a string
    if isinstance(value, list):
        return " ".join(value)
    return value or ""


def first_srcset_candidate(srcset: str) -> str:
    """``"//tn/a.webp 2x, //tn/b.webp 3x"`` -> ``"//tn/a.webp"``."""
    return srcset.strip().split(" ", 1)[0].rstrip(",")


def absolutize(url: str, base_url: str) -> str:
    """Resolve protocol-relative and root-relative URLs against ``base_url``."""
    if url.startswith("//"):
        scheme = base_url.split(":", 1)[0] if "://" in base_url else "https"
        return f"{scheme}:{url}"
    if url.startswith("/"):
        return f"{base_url.rstrip('/')}{url}"
    return url
