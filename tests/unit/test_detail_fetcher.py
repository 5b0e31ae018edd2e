"""Unit tests for the concurrent gallery block fan-out."""

import asyncio

import httpx
import pytest

from hitomi_source.config import Settings
from hitomi_source.domain.errors import FormatError, TransportError
from hitomi_source.services.detail_fetcher import DetailFetcher
from tests.fixtures.pages import gallery_block_html


def block_path(gallery_id: int) -> str:
    return f"/galleryblock/{gallery_id}.html"


def delayed_block(gallery_id: int, delay: float):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay)
        return httpx.Response(200, text=gallery_block_html(gallery_id))

    return handler


@pytest.mark.asyncio
class TestDetailFetcher:
    async def test_entries_keep_input_order(self, settings, transport, fake_site):
        # Later ids answer first
        for gallery_id, delay in ((1, 0.03), (2, 0.02), (3, 0.0)):
            fake_site.add(block_path(gallery_id), delayed_block(gallery_id, delay))

        summaries = await DetailFetcher(settings, transport).fetch_summaries([1, 2, 3])

        assert [summary.title for summary in summaries] == ["Gallery 1", "Gallery 2", "Gallery 3"]
        assert summaries[0].detail_url == "https://hitomi.la/doujinshi/gallery-1.html"
        assert summaries[0].thumbnail_url == "https://tn.hitomi.la/smalltn/1.jpg"

    async def test_empty_page_makes_no_requests(self, settings, transport, fake_site):
        assert await DetailFetcher(settings, transport).fetch_summaries([]) == []
        assert fake_site.requests == []

    async def test_high_quality_thumbnails_use_srcset(self, transport, fake_site):
        settings = Settings(use_high_quality_thumbs=True)
        fake_site.add(block_path(7), gallery_block_html(7))

        [summary] = await DetailFetcher(settings, transport).fetch_summaries([7])

        assert summary.thumbnail_url == "https://tn.hitomi.la/webpbigtn/7.webp"

    async def test_first_failure_cancels_siblings_and_propagates(self, settings, transport, fake_site):
        cancelled: list[int] = []

        def hanging_block(gallery_id: int):
            async def handler(request: httpx.Request) -> httpx.Response:
                try:
                    await asyncio.Event().wait()
                except asyncio.CancelledError:
                    cancelled.append(gallery_id)
                    raise
                raise AssertionError("unreachable")

            return handler

        fake_site.add(block_path(1), hanging_block(1))
        fake_site.add(block_path(2), lambda request: httpx.Response(500, text="boom"))
        fake_site.add(block_path(3), hanging_block(3))

        with pytest.raises(TransportError) as exc_info:
            await asyncio.wait_for(DetailFetcher(settings, transport).fetch_summaries([1, 2, 3]), timeout=5)

        assert exc_info.value.status_code == 500
        assert exc_info.value.url.endswith("/galleryblock/2.html")
        assert sorted(cancelled) == [1, 3]

    async def test_parse_failure_fails_the_page(self, settings, transport, fake_site):
        fake_site.add(block_path(1), gallery_block_html(1))
        fake_site.add(block_path(2), "<div>no heading here</div>")

        with pytest.raises(FormatError):
            await DetailFetcher(settings, transport).fetch_summaries([1, 2])

    async def test_partial_mode_drops_failed_ids(self, settings, transport, fake_site):
        fake_site.add(block_path(1), gallery_block_html(1))
        fake_site.add(block_path(3), gallery_block_html(3))

        summaries = await DetailFetcher(settings, transport, fail_fast=False).fetch_summaries([1, 2, 3])

        assert [summary.title for summary in summaries] == ["Gallery 1", "Gallery 3"]

    async def test_concurrency_is_bounded(self, transport, fake_site):
        settings = Settings(max_concurrent_requests=2)
        in_flight = 0
        peak = 0

        async def counting(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            gallery_id = int(request.url.path.rsplit("/", 1)[-1].split(".")[0])
            return httpx.Response(200, text=gallery_block_html(gallery_id))

        ids = list(range(1, 7))
        for gallery_id in ids:
            fake_site.add(block_path(gallery_id), counting)

        summaries = await DetailFetcher(settings, transport).fetch_summaries(ids)

        assert len(summaries) == 6
        assert peak <= 2
