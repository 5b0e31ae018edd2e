"""Conftest for unit tests - mark every test as unit and keep them offline."""

import httpx
import pytest

from hitomi_source.utils.transport import HttpTransport


def pytest_collection_modifyitems(config, items):
    """Automatically mark all tests in the unit directory as unit tests."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def block_real_network(monkeypatch):
    """Transports created without an injected client must not reach the network."""

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"unit tests are offline: {request.url}", request=request)

    original_create_client = HttpTransport._create_client

    def _offline_client(self) -> httpx.AsyncClient:
        client = original_create_client(self)
        client._transport = httpx.MockTransport(_refuse)
        return client

    monkeypatch.setattr(HttpTransport, "_create_client", _offline_client)
