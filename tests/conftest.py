"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import os
from pathlib import Path
import re
import sys

import httpx
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Complete test environment that overrides ALL possible config values
TEST_ENV = {
    "BASE_URL": "https://hitomi.la",
    "LTN_BASE_URL": "https://ltn.hitomi.la",
    "HTTP_TIMEOUT": "30",
    "MAX_CONCURRENT_REQUESTS": "5",
    "INDEX_VERSION_TTL_SECONDS": "600",
    "USE_HIGH_QUALITY_THUMBS": "false",
    "DETAIL_FETCH_FAIL_FAST": "true",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value

# Now we can safely import config-dependent modules
from hitomi_source.config import Settings  # noqa: E402
from hitomi_source.index.decoder import encode_ids  # noqa: E402
from hitomi_source.utils.transport import HttpTransport  # noqa: E402


_RANGE_RE = re.compile(r"bytes=(\d+)-(\d*)")

Route = bytes | str | Callable[[httpx.Request], httpx.Response]


@dataclass
class FakeSite:
    """Routes requests by URL path to canned bodies; honors Range headers.

    Byte bodies registered with ``ranged=True`` answer ranged requests with
    206 and a ``Content-Range`` header, like the real static host.
    """

    routes: dict[str, Route] = field(default_factory=dict)
    ranged: set[str] = field(default_factory=set)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(self, path: str, body: Route, *, ranged: bool = False) -> None:
        self.routes[path] = body
        if ranged:
            self.ranged.add(path)

    def add_ids(self, path: str, ids: list[int], *, ranged: bool = False) -> None:
        self.add(path, encode_ids(ids), ranged=ranged)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)

        body = route.encode("utf-8") if isinstance(route, str) else route
        range_header = request.headers.get("Range")
        if request.url.path in self.ranged and range_header:
            match = _RANGE_RE.fullmatch(range_header)
            assert match, f"bad Range header {range_header!r}"
            start = int(match.group(1))
            end = min(int(match.group(2)) if match.group(2) else len(body) - 1, len(body) - 1)
            if start >= len(body):
                return httpx.Response(416, headers={"Content-Range": f"bytes */{len(body)}"})
            return httpx.Response(
                206,
                content=body[start : end + 1],
                headers={"Content-Range": f"bytes {start}-{end}/{len(body)}"},
            )
        return httpx.Response(200, content=body)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Clean environment variables before each test and set test defaults."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


@pytest.fixture
def fake_site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def transport(settings, fake_site) -> HttpTransport:
    """HttpTransport whose client is served entirely by ``fake_site``."""
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake_site.handler),
        headers={"Referer": settings.get_referer()},
    )
    return HttpTransport(settings, client=client)

