"""
Shared pytest fixtures.

Nothing here talks to Cloudflare: HTTP is stubbed with requests-mock
and the API tests use the in-memory client.
"""

import pytest

from cfstream.config.settings import get_settings
from cfstream.core.models import Credentials
from cfstream.infrastructure.stream.client import CloudflareStreamClient, MockStreamClient


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials() -> Credentials:
    """Account-scoped credentials, no zone."""
    return Credentials(key="k", email="e@x.com", account="acct1", zone="")


@pytest.fixture
def client(credentials) -> CloudflareStreamClient:
    with CloudflareStreamClient(credentials) as stream_client:
        yield stream_client


@pytest.fixture
def mock_client() -> MockStreamClient:
    return MockStreamClient()


@pytest.fixture
def video_file(tmp_path):
    """A small fake video on disk."""
    path = tmp_path / "video.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 100)
    return path
