"""Gallery source facade.

``HitomiSource`` is the single object a host application talks to. It wires
the index, search and service components together and exposes the listing,
search, detail, page-list and image operations. Every operation either
returns a complete result or raises one error; nothing is partially
populated.

Example:
    async with HitomiSource(Settings()) as source:
        page = await source.search("female:maid -female:tsundere", page=1)
        for entry in page.entries:
            print(entry.title, entry.detail_url)
"""

from __future__ import annotations

import logging

from .config import Settings
from .domain.errors import UnsupportedOperationError
from .domain.model import ChapterRef, MetadataRecord, PageRef, ResultPage, SummaryRecord, gallery_id_from_url
from .index.nozomi import NozomiClient, TermLookup
from .index.range_fetcher import LATEST_NOZOMI, POPULAR_NOZOMI, RangeFetcher
from .index.version_cache import IndexVersionCache
from .observability.tracing import create_span
from .search.query_resolver import QueryResolver, paginate
from .services.asset_resolver import AssetUrlResolver
from .services.detail_fetcher import DetailFetcher
from .utils.manifest import parse_page_manifest
from .utils.metadata_extractor import MetadataExtractor
from .utils.transport import HttpTransport
from .utils.url_import import is_url_query, map_url_to_gallery_url


logger = logging.getLogger(__name__)

SOURCE_NAME = "hitomi.la"


class HitomiSource:
    """Client for the hitomi.la gallery index."""

    name = SOURCE_NAME
    lang = "all"
    supports_latest = True

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: HttpTransport | None = None,
        lookup: TermLookup | None = None,
        version_cache: IndexVersionCache | None = None,
    ):
        self.settings = settings or Settings()  # type: ignore[call-arg]
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(self.settings)

        self.lookup = lookup or NozomiClient(self.settings, self.transport)
        self.version_cache = version_cache or IndexVersionCache(
            self.lookup.get_index_version,
            ttl_seconds=self.settings.index_version_ttl_seconds,
        )
        self.range_fetcher = RangeFetcher(self.settings, self.transport)
        self.query_resolver = QueryResolver(self.lookup)
        self.detail_fetcher = DetailFetcher(self.settings, self.transport)
        self.metadata_extractor = MetadataExtractor(self.settings.base_url)
        self.asset_resolver = AssetUrlResolver(self.settings, self.transport)

    async def __aenter__(self) -> HitomiSource:
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    # Listings

    async def popular(self, page: int) -> ResultPage:
        with create_span("source.popular", attributes={"page": page}):
            return await self._listing(POPULAR_NOZOMI, page)

    async def latest(self, page: int) -> ResultPage:
        with create_span("source.latest", attributes={"page": page}):
            return await self._listing(LATEST_NOZOMI, page)

    async def _listing(self, resource_path: str, page: int) -> ResultPage:
        result = await self.range_fetcher.fetch_range(resource_path, page)
        entries = await self.detail_fetcher.fetch_summaries(result.ids)
        logger.info("Listed %s page %s: %s entries", resource_path, page, len(entries))
        return ResultPage(entries=tuple(entries), has_next_page=result.has_next_page)

    async def search(self, query: str, page: int) -> ResultPage:
        """Search by tag query, or import a pasted gallery URL."""
        with create_span("source.search", attributes={"query": query, "page": page}):
            if is_url_query(query):
                return await self._import_url(query)

            if page < 1:
                raise ValueError(f"Page numbers start at 1, got {page}")
            versions = await self.version_cache.get_versions()
            ids = await self.query_resolver.resolve(query, versions)
            page_ids, has_next_page = paginate(ids, page)
            entries = await self.detail_fetcher.fetch_summaries(page_ids)
            logger.info("Search %r page %s: %s of %s results", query, page, len(entries), len(ids))
            return ResultPage(entries=tuple(entries), has_next_page=has_next_page)

    async def _import_url(self, url: str) -> ResultPage:
        gallery_url = map_url_to_gallery_url(url, self.settings.base_url)
        if gallery_url is None:
            logger.info("URL %s does not point at a gallery", url)
            return ResultPage()

        metadata = await self.gallery_details(gallery_url)
        entry = SummaryRecord(
            title=metadata.title,
            thumbnail_url=metadata.thumbnail_url or "",
            detail_url=gallery_url,
        )
        return ResultPage(entries=(entry,), has_next_page=False)

    # Gallery details

    async def gallery_details(self, url: str) -> MetadataRecord:
        with create_span("source.gallery_details", attributes={"url": url}):
            gallery_id = gallery_id_from_url(url)
            response = await self.transport.get(self.detail_fetcher.block_url(gallery_id))
            return self.metadata_extractor.extract(response.text, str(response.url))

    async def chapters(self, url: str) -> list[ChapterRef]:
        return [ChapterRef(url=url)]

    async def page_list(self, url: str) -> list[PageRef]:
        with create_span("source.page_list", attributes={"url": url}):
            gallery_id = gallery_id_from_url(url)
            script = await self.transport.get_text(self.settings.ltn_url(f"galleries/{gallery_id}.js"))
            return parse_page_manifest(script)

    async def image_url(self, page: PageRef) -> str:
        with create_span("source.image_url", attributes={"page.index": page.index}):
            return await self.asset_resolver.resolve_url(page.content_hash)

    async def resolve_page(self, page: PageRef) -> PageRef:
        return page.with_image_url(await self.image_url(page))

    # Single-response entry points. Every real flow above needs several
    # requests, so these cannot be expressed as "parse one response".

    def parse_popular_response(self, response) -> ResultPage:
        raise UnsupportedOperationError("Popular listings are resolved with ranged reads; use popular()")

    def parse_latest_response(self, response) -> ResultPage:
        raise UnsupportedOperationError("Latest listings are resolved with ranged reads; use latest()")

    def search_request(self, page: int, query: str):
        raise UnsupportedOperationError("Searches are resolved in several steps; use search()")

    def parse_search_response(self, response) -> ResultPage:
        raise UnsupportedOperationError("Searches are resolved in several steps; use search()")

    def parse_details_response(self, response) -> MetadataRecord:
        raise UnsupportedOperationError("Use gallery_details()")

    def parse_chapter_list_response(self, response) -> list[ChapterRef]:
        raise UnsupportedOperationError("Galleries have a single chapter; use chapters()")

    def parse_image_url_response(self, response) -> str:
        raise UnsupportedOperationError("Image URLs are computed by the descrambling scripts; use image_url()")
