"""Boolean tag-query resolution over remote per-term id sets.

A query is a whitespace-separated list of terms. Terms prefixed with ``-``
are excluded, every other term is required:

    "female:maid -female:tsundere language:english"

Resolution folds the per-term sets in a fixed order: the first required term
(or the whole "all" bucket when there is none) seeds the result, the other
required terms are intersected in, and excluded terms are subtracted last.
The final set is returned in ascending gallery id order so page boundaries
are stable between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math

from ..domain.model import IndexVersions
from ..index.nozomi import TermLookup
from ..index.range_fetcher import PAGE_SIZE


logger = logging.getLogger(__name__)

EXCLUDE_MARKER = "-"


@dataclass(frozen=True)
class ParsedQuery:
    positive: list[str] = field(default_factory=list)
    negative: list[str] = field(default_factory=list)


def parse_query(query: str) -> ParsedQuery:
    """Partition ``query`` into required and excluded terms.

    Both lists come from the same single pass over the tokens, so choosing a
    seed term later never moves a required term into the excluded list.
    Tokens that are empty once the marker is stripped (a bare ``-``) are
    ignored.
    """
    positive: list[str] = []
    negative: list[str] = []
    for token in query.split():
        if token.startswith(EXCLUDE_MARKER):
            term = token[len(EXCLUDE_MARKER) :]
            if term:
                negative.append(term)
        else:
            positive.append(token)
    return ParsedQuery(positive=positive, negative=negative)


class QueryResolver:
    """Evaluates a query into a sorted list of gallery ids."""

    def __init__(self, lookup: TermLookup):
        self.lookup = lookup

    async def resolve(self, query: str, versions: IndexVersions) -> list[int]:
        parsed = parse_query(query)
        remaining = list(parsed.positive)

        if remaining:
            seed_term = remaining.pop(0)
            result = set(await self.lookup.ids_for_term(seed_term, versions))
        else:
            result = set(await self.lookup.all_ids(versions))

        for term in remaining:
            result &= set(await self.lookup.ids_for_term(term, versions))

        for term in parsed.negative:
            result -= set(await self.lookup.ids_for_term(term, versions))

        logger.debug(
            "Resolved %r to %s ids (required=%s, excluded=%s)",
            query,
            len(result),
            parsed.positive,
            parsed.negative,
        )
        return sorted(result)


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size)


def paginate(ids: list[int], page: int, page_size: int = PAGE_SIZE) -> tuple[list[int], bool]:
    """Return the ids on 1-based ``page`` and whether a later page exists.

    A page past the end is empty rather than an error.
    """
    if page < 1:
        raise ValueError(f"Page numbers start at 1, got {page}")
    start = (page - 1) * page_size
    return ids[start : start + page_size], page < page_count(len(ids), page_size)
