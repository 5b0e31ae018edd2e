"""Parser for the ``galleries/<id>.js`` page manifest."""

from __future__ import annotations

import orjson

from ..domain.errors import FormatError
from ..domain.model import PageRef


MANIFEST_PREFIX = "var galleryinfo = "


def parse_page_manifest(script: str) -> list[PageRef]:
    """Turn ``var galleryinfo = {...}`` into dense, zero-based page refs."""
    payload = script.strip().removeprefix(MANIFEST_PREFIX).rstrip(";")
    try:
        info = orjson.loads(payload)
    except orjson.JSONDecodeError as exc:
        raise FormatError(f"Page manifest is not valid JSON: {exc}") from exc

    files = info.get("files") if isinstance(info, dict) else None
    if not isinstance(files, list):
        raise FormatError("Page manifest has no files list")

    pages = []
    for index, entry in enumerate(files):
        content_hash = entry.get("hash") if isinstance(entry, dict) else None
        if not isinstance(content_hash, str) or not content_hash:
            raise FormatError(f"Page manifest entry {index} has no hash")
        pages.append(PageRef(index=index, content_hash=content_hash))
    return pages
