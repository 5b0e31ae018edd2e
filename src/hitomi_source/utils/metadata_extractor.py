"""Extract rich gallery metadata from a gallery detail document.

The document carries a label/value table (``.dj-desc``) whose rows map onto
record fields and tags:

==========  =====================================  ==========================
label       record field                           tags
==========  =====================================  ==========================
group       ``group`` (cell text)                  group, structural
type        ``genre`` (cell text)                  type, structural
series      ``series`` (link texts)                series, structural
language    ``language`` (from the link path)      language, structural
characters  ``characters`` (link texts)            character, freeform
tags        -                                      male/female/misc, freeform
==========  =====================================  ==========================

Artists are read from ``.artist-list`` whether or not the table exists.
"""

from __future__ import annotations

from datetime import datetime
import logging
import re

from bs4 import Tag as Element

from ..domain.errors import FormatError
from ..domain.model import MetadataRecord, Tag, TagKind
from .markup import absolutize, attr, element_text, first_srcset_candidate, parse_html


logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S%z"
_SHORT_OFFSET_RE = re.compile(r"([+-]\d{2})$")

# Gendered tags are rendered with a two character suffix (" ♀" / " ♂")
GENDER_SUFFIX_LENGTH = 2


def tag_namespace(href: str) -> str:
    if href.startswith("/tag/male"):
        return "male"
    if href.startswith("/tag/female"):
        return "female"
    return "misc"


def tag_from_link(href: str, text: str) -> Tag:
    namespace = tag_namespace(href)
    if namespace != "misc":
        text = text[:-GENDER_SUFFIX_LENGTH]
    return Tag(namespace=namespace, text=text, kind=TagKind.FREEFORM)


def language_from_href(href: str) -> str | None:
    """``/index-english.html`` -> ``english``."""
    if "-" not in href:
        return None
    code = href.split("-")[1].split(".", 1)[0]
    return code or None


def parse_upload_date(text: str) -> datetime | None:
    """Parse ``2020-01-31 12:34:56-05``; returns None when the text does not fit."""
    normalized = _SHORT_OFFSET_RE.sub(r"\g<1>00", text.strip())
    try:
        return datetime.strptime(normalized, DATE_FORMAT)
    except ValueError:
        logger.debug("Unparseable upload date %r", text)
        return None


class MetadataExtractor:
    """Maps a detail document onto a :class:`MetadataRecord`."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def extract(self, html: str, url: str) -> MetadataRecord:
        doc = parse_html(html)

        gallery = doc.find("div")
        heading = gallery.find("h1") if gallery is not None else None
        if heading is None:
            raise FormatError(f"Detail document for {url} has no gallery heading")

        tags: list[Tag] = []
        fields: dict[str, object] = {}

        artists = [element_text(a) for a in gallery.select(".artist-list a")]
        tags += [Tag(namespace="artist", text=artist, kind=TagKind.STRUCTURAL) for artist in artists]

        for row in doc.select(".dj-desc tr"):
            cells = row.find_all(recursive=False)
            if len(cells) < 2:
                continue
            self._apply_row(element_text(cells[0]).lower(), cells[1], fields, tags)

        thumbnail = first_srcset_candidate(attr(doc.find("source"), "data-srcset"))
        date_element = doc.select_one(".date")

        return MetadataRecord(
            canonical_url=url,
            title=element_text(heading),
            thumbnail_url=absolutize(thumbnail, self.base_url) if thumbnail else None,
            artists=tuple(artists),
            tags=tuple(tags),
            uploaded_at=parse_upload_date(element_text(date_element)) if date_element is not None else None,
            **fields,
        )

    def _apply_row(self, label: str, content: Element, fields: dict[str, object], tags: list[Tag]) -> None:
        link_texts = [element_text(a) for a in content.find_all("a")]

        if label == "group":
            group = fields["group"] = element_text(content)
            tags.append(Tag(namespace="group", text=group, kind=TagKind.STRUCTURAL))
        elif label == "type":
            genre = fields["genre"] = element_text(content)
            tags.append(Tag(namespace="type", text=genre, kind=TagKind.STRUCTURAL))
        elif label == "series":
            fields["series"] = tuple(link_texts)
            tags += [Tag(namespace="series", text=text, kind=TagKind.STRUCTURAL) for text in link_texts]
        elif label == "language":
            language = language_from_href(attr(content.find("a"), "href"))
            if language:
                fields["language"] = language
                tags.append(Tag(namespace="language", text=language, kind=TagKind.STRUCTURAL))
        elif label == "characters":
            fields["characters"] = tuple(link_texts)
            tags += [Tag(namespace="character", text=text, kind=TagKind.FREEFORM) for text in link_texts]
        elif label == "tags":
            tags += [tag_from_link(attr(a, "href"), element_text(a)) for a in content.find_all("a")]
