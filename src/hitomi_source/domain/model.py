"""Domain model - value objects produced by the gallery source.

All records are immutable Pydantic dataclasses: they are validated once at
construction and never mutated afterwards. Nothing in this module talks to
the network.
"""

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Annotated, Self
from urllib.parse import urlparse

from pydantic import Field
from pydantic.dataclasses import dataclass

from .errors import FormatError


class TagKind(str, Enum):
    """Whether a tag describes structure (who/what) or free-form content."""

    STRUCTURAL = "structural"
    FREEFORM = "freeform"


@dataclass(frozen=True)
class IndexVersions:
    """The (tag index, gallery index) version pair used for one query resolution."""

    tag_index: int
    gallery_index: int


@dataclass(frozen=True)
class Tag:
    """A namespaced tag such as ``female:maid`` or ``artist:someone``."""

    namespace: Annotated[str, Field(min_length=1)]
    text: str
    kind: TagKind = TagKind.FREEFORM

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.text)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.text}"


@dataclass(frozen=True)
class SummaryRecord:
    """Minimal listing entry built from a gallery block fragment."""

    title: str
    thumbnail_url: str
    detail_url: str


@dataclass(frozen=True)
class MetadataRecord:
    """Rich gallery metadata extracted from a detail document.

    ``tags`` is unique on (namespace, text); the first occurrence wins and
    insertion order is kept so the record renders the way the page lists it.
    """

    canonical_url: str
    title: str
    thumbnail_url: str | None = None
    artists: tuple[str, ...] = ()
    group: str | None = None
    genre: str | None = None
    series: tuple[str, ...] = ()
    language: str | None = None
    characters: tuple[str, ...] = ()
    tags: tuple[Tag, ...] = ()
    uploaded_at: datetime | None = None

    def __post_init__(self) -> None:
        unique: dict[tuple[str, str], Tag] = {}
        for tag in self.tags:
            unique.setdefault(tag.key, tag)
        if len(unique) != len(self.tags):
            object.__setattr__(self, "tags", tuple(unique.values()))

    def tags_in(self, namespace: str) -> list[str]:
        """Return the tag texts filed under ``namespace``."""
        return [tag.text for tag in self.tags if tag.namespace == namespace]

    def to_summary(self) -> SummaryRecord:
        return SummaryRecord(
            title=self.title,
            thumbnail_url=self.thumbnail_url or "",
            detail_url=self.canonical_url,
        )


@dataclass(frozen=True)
class PageRef:
    """One page of a gallery, identified by its content hash."""

    index: Annotated[int, Field(ge=0)]
    content_hash: Annotated[str, Field(min_length=1)]
    image_url: str | None = None

    def with_image_url(self, image_url: str) -> Self:
        return replace(self, image_url=image_url)


@dataclass(frozen=True)
class ChapterRef:
    """Galleries are single-chapter; this points the reader at the gallery itself."""

    url: str
    name: str = "Chapter"
    number: float = 0.0


@dataclass(frozen=True)
class ResultPage:
    """One page of listing or search results."""

    entries: tuple[SummaryRecord, ...] = ()
    has_next_page: bool = False

    def __len__(self) -> int:
        return len(self.entries)


def gallery_id_from_url(url: str) -> int:
    """Extract the numeric gallery id from a gallery, reader or block URL.

    ``https://hitomi.la/manga/some-title-123.html`` -> ``123``
    """
    last_segment = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    candidate = last_segment.rsplit("-", 1)[-1]
    if "." in candidate:
        candidate = candidate.rsplit(".", 1)[0]
    if not candidate.isdigit():
        raise FormatError(f"No gallery id in URL: {url!r}")
    return int(candidate)
