"""Client for the hitomi.la gallery index: listings, tag search, metadata and page images."""

from hitomi_source.config import Settings
from hitomi_source.source import HitomiSource


__all__ = ["HitomiSource", "Settings"]
