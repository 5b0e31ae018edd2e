"""Time-bounded cache for the tag and gallery index versions.

Each index family owns one slot holding an immutable ``(version, fetched_at)``
entry. A refresh builds a new entry and swaps it into the slot in a single
assignment, so readers never observe a half-written pair. Refreshes are not
serialized: two callers that both see an expired slot each fetch, and the
last response to land wins. Staleness is bounded by the TTL alone.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
import time

from ..domain.model import IndexVersions


logger = logging.getLogger(__name__)

TAG_INDEX = "tagindex"
GALLERY_INDEX = "galleriesindex"
INDEX_FAMILIES = (TAG_INDEX, GALLERY_INDEX)
DEFAULT_TTL_SECONDS = 600.0


@dataclass(frozen=True)
class CachedVersion:
    """A version together with the monotonic time it was fetched."""

    version: int
    fetched_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.fetched_at < ttl


class IndexVersionCache:
    """Caches one version per index family for ``ttl_seconds``."""

    def __init__(
        self,
        fetch_version: Callable[[str], Awaitable[int]],
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_version = fetch_version
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._slots: dict[str, CachedVersion | None] = dict.fromkeys(INDEX_FAMILIES)

    def peek(self, index_name: str) -> CachedVersion | None:
        """Return the current slot content without refreshing it."""
        self._check_family(index_name)
        return self._slots[index_name]

    async def get_version(self, index_name: str) -> int:
        """Return the cached version for ``index_name``, refreshing it when expired."""
        self._check_family(index_name)
        cached = self._slots[index_name]
        if cached is not None and cached.is_fresh(self._clock(), self.ttl_seconds):
            return cached.version

        version = await self._fetch_version(index_name)
        self._slots[index_name] = CachedVersion(version=version, fetched_at=self._clock())
        logger.debug("Refreshed %s version -> %s", index_name, version)
        return version

    async def get_versions(self) -> IndexVersions:
        """Return the tag and gallery versions, checking both slots concurrently."""
        tag_version, gallery_version = await asyncio.gather(
            self.get_version(TAG_INDEX),
            self.get_version(GALLERY_INDEX),
        )
        return IndexVersions(tag_index=tag_version, gallery_index=gallery_version)

    def invalidate(self, index_name: str | None = None) -> None:
        """Drop one slot, or both when ``index_name`` is None."""
        names = INDEX_FAMILIES if index_name is None else (index_name,)
        for name in names:
            self._check_family(name)
            self._slots[name] = None

    @staticmethod
    def _check_family(index_name: str) -> None:
        if index_name not in INDEX_FAMILIES:
            raise ValueError(f"Unknown index family {index_name!r}; expected one of {INDEX_FAMILIES}")
