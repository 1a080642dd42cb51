"""
Tests for the in-memory Stream client used in mock mode.
"""

import io

import pytest

from cfstream.core.errors import InvalidFile, InvalidOrigins, OperationFailed
from cfstream.core.models import resource_uid


class TestMockStreamClient:

    def test_upload_registers_video(self, mock_client, video_file):
        resource_url = mock_client.upload(video_file)

        assert resource_url.startswith("mock://stream/")

        result = mock_client.status(resource_url)["result"]
        assert result["uid"] == resource_uid(resource_url)
        assert result["size"] == video_file.stat().st_size
        assert result["meta"] == {"filename": "video.mp4"}
        assert result["readyToStream"] is True

    def test_created_but_not_sent_is_pending(self, mock_client):
        resource_url = mock_client.create_resource("clip.mp4", 42)

        result = mock_client.status(resource_url)["result"]
        assert result["readyToStream"] is False
        assert result["status"]["state"] == "pendingupload"

    def test_send_bytes_to_created_resource(self, mock_client):
        resource_url = mock_client.create_resource("clip.mp4", 4)

        mock_client.send_bytes(resource_url, io.BytesIO(b"abcd"), 4)

        assert mock_client.status(resource_url)["result"]["size"] == 4

    def test_validation_matches_real_client(self, mock_client, tmp_path):
        with pytest.raises(InvalidFile):
            mock_client.create_resource("", 10)
        with pytest.raises(InvalidFile):
            mock_client.send_bytes("mock://stream/x", None, 10)
        with pytest.raises(InvalidFile):
            mock_client.upload(tmp_path / "missing.mp4")

    def test_allow_and_signed_urls(self, mock_client, video_file):
        resource_url = mock_client.upload(video_file)

        mock_client.allow(resource_url, "a.com,b.com")
        mock_client.require_signed_urls(resource_url)

        result = mock_client.status(resource_url)["result"]
        assert result["allowedOrigins"] == ["a.com,b.com"]
        assert result["requireSignedURLs"] is True

    def test_allow_rejects_paths(self, mock_client, video_file):
        resource_url = mock_client.upload(video_file)

        with pytest.raises(InvalidOrigins):
            mock_client.allow(resource_url, "https://a.com")

    def test_code_mentions_uid(self, mock_client, video_file):
        resource_url = mock_client.upload(video_file)

        assert resource_uid(resource_url) in mock_client.code(resource_url)

    def test_delete_then_unknown(self, mock_client, video_file):
        resource_url = mock_client.upload(video_file)

        mock_client.delete(resource_url)

        with pytest.raises(OperationFailed) as exc_info:
            mock_client.status(resource_url)
        assert exc_info.value.status_code == 404

        with pytest.raises(OperationFailed):
            mock_client.delete(resource_url)
