"""Domain layer - immutable records and the error taxonomy.

No HTTP clients or parsers live here; the index, search and services
packages build these records from remote payloads.
"""

from hitomi_source.domain.errors import (
    FormatError,
    HitomiSourceError,
    RangeHeaderError,
    ScriptEvaluationError,
    TransportError,
    UnsupportedOperationError,
)
from hitomi_source.domain.model import (
    ChapterRef,
    IndexVersions,
    MetadataRecord,
    PageRef,
    ResultPage,
    SummaryRecord,
    Tag,
    TagKind,
    gallery_id_from_url,
)


__all__ = [
    "ChapterRef",
    "FormatError",
    "HitomiSourceError",
    "IndexVersions",
    "MetadataRecord",
    "PageRef",
    "RangeHeaderError",
    "ResultPage",
    "ScriptEvaluationError",
    "SummaryRecord",
    "Tag",
    "TagKind",
    "TransportError",
    "UnsupportedOperationError",
    "gallery_id_from_url",
]
