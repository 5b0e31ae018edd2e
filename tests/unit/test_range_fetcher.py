"""Unit tests for ranged listing reads and Content-Range parsing."""

import httpx
import pytest

from hitomi_source.domain.errors import FormatError, RangeHeaderError, TransportError
from hitomi_source.index.decoder import encode_ids
from hitomi_source.index.range_fetcher import (
    POPULAR_NOZOMI,
    RangeFetcher,
    byte_window,
    parse_content_range,
)


class TestByteWindow:
    @pytest.mark.parametrize(
        ("page", "expected"),
        [(1, (0, 99)), (2, (100, 199)), (3, (200, 299)), (10, (900, 999))],
    )
    def test_each_page_covers_one_hundred_bytes(self, page, expected):
        assert byte_window(page) == expected

    def test_page_zero_is_rejected(self):
        with pytest.raises(ValueError):
            byte_window(0)


class TestParseContentRange:
    def test_parses_header_with_unit(self):
        parsed = parse_content_range("bytes 200-299/1000")

        assert (parsed.start, parsed.end, parsed.total) == (200, 299, 1000)
        assert parsed.has_more is True

    def test_parses_header_without_unit(self):
        assert parse_content_range("200-299/1000").has_more is True

    def test_last_slice_has_no_more(self):
        assert parse_content_range("bytes 900-999/1000").has_more is False

    @pytest.mark.parametrize("header", [None, "", "bytes */1000", "bytes 0-99/*", "garbage", "bytes 99-0/1000"])
    def test_malformed_headers_are_fatal(self, header):
        with pytest.raises(RangeHeaderError):
            parse_content_range(header)


class TestRangeFetcher:
    @pytest.mark.asyncio
    async def test_first_page_of_popular_listing(self, settings, transport, fake_site):
        fake_site.add_ids("/popular-all.nozomi", list(range(1, 61)), ranged=True)
        fetcher = RangeFetcher(settings, transport)

        result = await fetcher.fetch_range(POPULAR_NOZOMI, 1)

        assert result.ids == list(range(1, 26))
        assert result.has_next_page is True
        assert fake_site.requests[0].headers["Range"] == "bytes=0-99"

    @pytest.mark.asyncio
    async def test_last_partial_page_has_no_next(self, settings, transport, fake_site):
        fake_site.add_ids("/popular-all.nozomi", list(range(1, 61)), ranged=True)
        fetcher = RangeFetcher(settings, transport)

        result = await fetcher.fetch_range(POPULAR_NOZOMI, 3)

        assert result.ids == list(range(51, 61))
        assert result.has_next_page is False

    @pytest.mark.asyncio
    async def test_next_page_follows_served_range_not_body(self, settings, transport, fake_site):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(206, content=encode_ids([4, 3, 2]), headers={"Content-Range": "200-299/1000"})

        fake_site.add("/popular-all.nozomi", handler)
        fetcher = RangeFetcher(settings, transport)

        result = await fetcher.fetch_range(POPULAR_NOZOMI, 2)

        assert result.ids == [4, 3, 2]
        assert result.has_next_page is True
        assert fake_site.requests[0].headers["Range"] == "bytes=100-199"

    @pytest.mark.asyncio
    async def test_missing_content_range_fails_the_listing(self, settings, transport, fake_site):
        fake_site.add_ids("/popular-all.nozomi", [1, 2, 3])
        fetcher = RangeFetcher(settings, transport)

        with pytest.raises(RangeHeaderError):
            await fetcher.fetch_range(POPULAR_NOZOMI, 1)

    @pytest.mark.asyncio
    async def test_truncated_body_fails_with_format_error(self, settings, transport, fake_site):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(206, content=b"\x00\x00\x00\x01\x00", headers={"Content-Range": "bytes 0-4/5"})

        fake_site.add("/popular-all.nozomi", handler)
        fetcher = RangeFetcher(settings, transport)

        with pytest.raises(FormatError):
            await fetcher.fetch_range(POPULAR_NOZOMI, 1)

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, settings, transport, fake_site):
        fetcher = RangeFetcher(settings, transport)

        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch_range(POPULAR_NOZOMI, 1)

        assert exc_info.value.status_code == 404
