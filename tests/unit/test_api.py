"""
Tests for the FastAPI surface.

Routes run against the in-memory client through dependency overrides,
so the full request path (auth, validation, error mapping) is
exercised without Cloudflare.
"""

import pytest
from fastapi.testclient import TestClient

from cfstream.api.dependencies import get_stream_client
from cfstream.config.settings import Settings, get_settings
from cfstream.infrastructure.stream.client import MockStreamClient
from cfstream.main import create_app


API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}


def make_client(settings: Settings, stream_client=None) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    if stream_client is not None:
        app.dependency_overrides[get_stream_client] = lambda: stream_client
    return TestClient(app)


@pytest.fixture
def mock_settings() -> Settings:
    return Settings(_env_file=None, api_keys=API_KEY, cfstream_mock_mode=True)


@pytest.fixture
def api(mock_settings, mock_client) -> TestClient:
    return make_client(mock_settings, mock_client)


def upload(api: TestClient, content: bytes = b"fake video bytes") -> dict:
    response = api.post(
        "/api/v1/videos/upload",
        files={"video": ("clip.mp4", content, "video/mp4")},
        headers=HEADERS,
    )
    assert response.status_code == 201
    return response.json()


# ---------------------------------------------------------------------------
# Authentication Tests
# ---------------------------------------------------------------------------

class TestAuthentication:

    def test_missing_api_key(self, api):
        response = api.get("/api/v1/videos/status", params={"resource_url": "mock://stream/x"})
        assert response.status_code == 403

    def test_wrong_api_key(self, api):
        response = api.get(
            "/api/v1/videos/status",
            params={"resource_url": "mock://stream/x"},
            headers={"X-API-Key": "nope"},
        )
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# Video Endpoint Tests
# ---------------------------------------------------------------------------

class TestVideoEndpoints:

    def test_upload(self, api, mock_client):
        body = upload(api)

        assert body["filename"] == "clip.mp4"
        assert body["size_bytes"] == len(b"fake video bytes")
        assert body["resource_url"] == f"mock://stream/{body['uid']}"

        status = mock_client.status(body["resource_url"])
        assert status["result"]["meta"]["filename"] == "clip.mp4"

    @pytest.mark.parametrize("client_filename", ["..", ".", "../..", "dir/.."])
    def test_upload_unusable_filename_falls_back(self, api, client_filename):
        """Names that resolve to a directory are replaced by video.mp4."""
        response = api.post(
            "/api/v1/videos/upload",
            files={"video": (client_filename, b"abc", "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 201
        assert response.json()["filename"] == "video.mp4"
        assert response.json()["size_bytes"] == 3

    def test_upload_strips_directories_from_filename(self, api):
        response = api.post(
            "/api/v1/videos/upload",
            files={"video": ("../../etc/clip.mp4", b"abc", "video/mp4")},
            headers=HEADERS,
        )

        assert response.status_code == 201
        assert response.json()["filename"] == "clip.mp4"

    def test_upload_empty_file_is_bad_request(self, api):
        response = api.post(
            "/api/v1/videos/upload",
            files={"video": ("clip.mp4", b"", "video/mp4")},
            headers=HEADERS,
        )
        assert response.status_code == 400

    def test_upload_too_large(self, mock_client):
        settings = Settings(
            _env_file=None,
            api_keys=API_KEY,
            cfstream_mock_mode=True,
            max_upload_size_mb=0,
        )
        api = make_client(settings, mock_client)

        response = api.post(
            "/api/v1/videos/upload",
            files={"video": ("clip.mp4", b"x", "video/mp4")},
            headers=HEADERS,
        )
        assert response.status_code == 413

    def test_status(self, api):
        resource_url = upload(api)["resource_url"]

        response = api.get(
            "/api/v1/videos/status",
            params={"resource_url": resource_url},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["result"]["readyToStream"] is True

    def test_embed(self, api):
        body = upload(api)

        response = api.get(
            "/api/v1/videos/embed",
            params={"resource_url": body["resource_url"]},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert body["uid"] in response.json()["code"]

    def test_delete(self, api):
        resource_url = upload(api)["resource_url"]

        response = api.delete(
            "/api/v1/videos",
            params={"resource_url": resource_url},
            headers=HEADERS,
        )
        assert response.status_code == 204

        # Gone: the client error surfaces as a bad gateway
        response = api.get(
            "/api/v1/videos/status",
            params={"resource_url": resource_url},
            headers=HEADERS,
        )
        assert response.status_code == 502
        assert response.json()["upstream_status"] == 404

    def test_allowed_origins(self, api, mock_client):
        resource_url = upload(api)["resource_url"]

        response = api.post(
            "/api/v1/videos/allowed-origins",
            json={"resource_url": resource_url, "origins": "example.com"},
            headers=HEADERS,
        )

        assert response.status_code == 204
        assert mock_client.status(resource_url)["result"]["allowedOrigins"] == ["example.com"]

    def test_allowed_origins_rejects_paths(self, api):
        resource_url = upload(api)["resource_url"]

        response = api.post(
            "/api/v1/videos/allowed-origins",
            json={"resource_url": resource_url, "origins": "https://example.com"},
            headers=HEADERS,
        )

        assert response.status_code == 400

    def test_require_signed_urls(self, api, mock_client):
        resource_url = upload(api)["resource_url"]

        response = api.post(
            "/api/v1/videos/require-signed-urls",
            json={"resource_url": resource_url},
            headers=HEADERS,
        )

        assert response.status_code == 204
        assert mock_client.status(resource_url)["result"]["requireSignedURLs"] is True

    def test_unconfigured_credentials(self):
        """Without CFSTREAM_* settings the video endpoints answer 503."""
        settings = Settings(
            _env_file=None,
            api_keys=API_KEY,
            cfstream_mock_mode=False,
            cfstream_key="",
            cfstream_email="",
            cfstream_account="",
            cfstream_zone="",
        )
        api = make_client(settings)

        response = api.get(
            "/api/v1/videos/status",
            params={"resource_url": "https://upload.example/videoA"},
            headers=HEADERS,
        )

        assert response.status_code == 503


# ---------------------------------------------------------------------------
# Health Endpoint Tests
# ---------------------------------------------------------------------------

class TestHealth:

    def test_liveness(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["details"] == {"mock_mode": True}

    def test_ready_in_mock_mode(self, api):
        response = api.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready_without_credentials(self):
        settings = Settings(
            _env_file=None,
            cfstream_mock_mode=False,
            cfstream_key="",
            cfstream_email="",
            cfstream_account="",
            cfstream_zone="",
        )
        api = make_client(settings)

        response = api.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
