"""Binary nozomi indexes: decoding, ranged listing reads, term lookups and version caching."""

from .decoder import decode_ids, encode_ids
from .nozomi import NozomiClient, TermLookup
from .range_fetcher import LATEST_NOZOMI, PAGE_SIZE, POPULAR_NOZOMI, RangeFetcher, RangeResult
from .version_cache import GALLERY_INDEX, TAG_INDEX, IndexVersionCache


__all__ = [
    "GALLERY_INDEX",
    "LATEST_NOZOMI",
    "PAGE_SIZE",
    "POPULAR_NOZOMI",
    "TAG_INDEX",
    "IndexVersionCache",
    "NozomiClient",
    "RangeFetcher",
    "RangeResult",
    "TermLookup",
    "decode_ids",
    "encode_ids",
]
