"""Remote-facing services: listing fan-out and image URL resolution."""

from .asset_resolver import AssetUrlResolver
from .detail_fetcher import DetailFetcher


__all__ = [
    "AssetUrlResolver",
    "DetailFetcher",
]
