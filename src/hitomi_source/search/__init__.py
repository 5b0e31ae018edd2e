"""Query parsing, resolution and pagination."""

from .query_resolver import ParsedQuery, QueryResolver, page_count, paginate, parse_query


__all__ = ["ParsedQuery", "QueryResolver", "page_count", "paginate", "parse_query"]
