"""Parser for the per-gallery block fragment used by listings."""

from __future__ import annotations

from ..domain.errors import FormatError
from ..domain.model import SummaryRecord
from .markup import absolutize, attr, element_text, first_srcset_candidate, parse_html


def parse_gallery_block(html: str, *, base_url: str, high_quality_thumbs: bool = False) -> SummaryRecord:
    """Build a listing entry from a ``galleryblock/<id>.html`` fragment.

    The title and detail link come from the ``h1`` heading. The thumbnail
    comes from the ``<source data-srcset>`` candidate when high quality is
    requested, otherwise from the ``<img data-src>`` fallback.
    """
    doc = parse_html(html)

    heading = doc.find("h1")
    if heading is None:
        raise FormatError("Gallery block has no <h1> heading")
    link = heading.find("a", href=True)
    if link is None:
        raise FormatError("Gallery block heading has no link")

    if high_quality_thumbs:
        thumbnail = first_srcset_candidate(attr(doc.find("source"), "data-srcset"))
    else:
        thumbnail = attr(doc.find("img"), "data-src")
    if not thumbnail:
        raise FormatError("Gallery block has no thumbnail image")

    return SummaryRecord(
        title=element_text(heading),
        thumbnail_url=absolutize(thumbnail, base_url),
        detail_url=absolutize(attr(link, "href"), base_url),
    )
