import sys
from pathlib import Path

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netool.httpclient import Client  # noqa: E402
from netool.httpclient import client as client_module  # noqa: E402


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )


@pytest.fixture
def sleeps(monkeypatch):
    """Record retry sleeps instead of blocking."""
    recorded = []
    monkeypatch.setattr(client_module.time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def make_client():
    """Build a Client backed by an in-process mock server.

    The handler receives each ``httpx.Request`` and returns an
    ``httpx.Response``. Requests seen by the server are collected on
    ``client.requests``.
    """
    clients = []

    def factory(handler):
        requests = []

        def recording_handler(request):
            requests.append(request)
            return handler(request)

        http_client = httpx.Client(transport=httpx.MockTransport(recording_handler))
        client = Client(http_client=http_client)
        client.requests = requests
        clients.append(http_client)
        return client

    yield factory

    for http_client in clients:
        http_client.close()
