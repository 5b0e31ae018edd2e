"""Ranged reads over nozomi listing files.

Each listing page maps to a fixed 100-byte window (25 ids of 4 bytes).
Whether another page exists is read from the ``Content-Range`` header the
server returns with the slice, never inferred from the body length.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from ..config import Settings
from ..domain.errors import RangeHeaderError
from ..utils.transport import HttpTransport
from .decoder import ID_WIDTH, decode_ids


logger = logging.getLogger(__name__)

PAGE_SIZE = 25
BYTES_PER_PAGE = PAGE_SIZE * ID_WIDTH

POPULAR_NOZOMI = "popular-all.nozomi"
LATEST_NOZOMI = "index-all.nozomi"

_CONTENT_RANGE_RE = re.compile(r"^\s*(?:bytes\s+)?(?P<start>\d+)-(?P<end>\d+)/(?P<total>\d+)\s*$")


@dataclass(frozen=True)
class ContentRange:
    start: int
    end: int
    total: int

    @property
    def has_more(self) -> bool:
        return self.end < self.total - 1


@dataclass(frozen=True)
class RangeResult:
    ids: list[int]
    has_next_page: bool


def byte_window(page: int) -> tuple[int, int]:
    """Inclusive byte range covering listing ``page`` (1-based)."""
    if page < 1:
        raise ValueError(f"Page numbers start at 1, got {page}")
    start = BYTES_PER_PAGE * (page - 1)
    return start, start + BYTES_PER_PAGE - 1


def parse_content_range(header: str | None) -> ContentRange:
    """Parse ``bytes 200-299/1000`` (the ``bytes`` unit is optional)."""
    if not header:
        raise RangeHeaderError("Ranged response carried no Content-Range header")
    match = _CONTENT_RANGE_RE.match(header)
    if match is None:
        raise RangeHeaderError(f"Unparseable Content-Range header: {header!r}")
    start, end, total = (int(match.group(name)) for name in ("start", "end", "total"))
    if end < start:
        raise RangeHeaderError(f"Content-Range ends before it starts: {header!r}")
    return ContentRange(start=start, end=end, total=total)


class RangeFetcher:
    """Fetches one page of gallery ids from a nozomi listing file."""

    def __init__(self, settings: Settings, transport: HttpTransport):
        self.settings = settings
        self.transport = transport

    async def fetch_range(self, resource_path: str, page: int) -> RangeResult:
        start, end = byte_window(page)
        url = self.settings.ltn_url(resource_path)
        response = await self.transport.ranged_get(url, start, end)

        content_range = parse_content_range(response.headers.get("Content-Range"))
        ids = decode_ids(response.content)
        logger.debug(
            "Range %s-%s of %s served %s ids (total bytes %s)",
            start,
            end,
            resource_path,
            len(ids),
            content_range.total,
        )
        return RangeResult(ids=ids, has_next_page=content_range.has_more)
