"""Transport and markup parsing helpers."""

from .gallery_block import parse_gallery_block
from .manifest import parse_page_manifest
from .metadata_extractor import MetadataExtractor
from .transport import HttpTransport
from .url_import import map_url_to_gallery_url


__all__ = [
    "HttpTransport",
    "MetadataExtractor",
    "map_url_to_gallery_url",
    "parse_gallery_block",
    "parse_page_manifest",
]
