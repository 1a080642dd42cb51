"""
Cloudflare Stream API client.

Wraps the handful of Stream endpoints we need: TUS upload, status,
delete, embed code, allowed origins and the signed-URL flag. Each call
is one blocking HTTP request (two for upload) followed by a status
code check.

Mock mode keeps videos in memory, enabling API testing without a
Cloudflare account.
"""

import logging
from pathlib import Path
from typing import Any, BinaryIO, Optional, Protocol, Union
from uuid import uuid4

import requests

from ...core.errors import InvalidFile, InvalidOrigins, OperationFailed
from ...core.models import (
    DEFAULT_API_BASE_URL,
    TUS_VERSION,
    Credentials,
    encode_upload_metadata,
    open_upload,
    resource_uid,
)

logger = logging.getLogger(__name__)


class StreamClient(Protocol):
    """
    Protocol for Stream video operations.

    Routes and tests depend on this rather than on a concrete client,
    so the in-memory mock can stand in for Cloudflare.
    """

    def status(self, resource_url: str) -> Any:
        """Fetch the video's JSON description."""
        ...

    def upload(self, filepath: Union[str, Path]) -> str:
        """Upload a local file and return its resource URL."""
        ...

    def create_resource(self, filename: str, filesize: int) -> str:
        """Create an empty upload and return its resource URL."""
        ...

    def send_bytes(self, location: str, stream: Optional[BinaryIO], filesize: int) -> None:
        """Send the video bytes to a created upload."""
        ...

    def delete(self, resource_url: str) -> None:
        ...

    def code(self, resource_url: str) -> str:
        """Fetch the HTML embed code."""
        ...

    def allow(self, resource_url: str, origins: str) -> None:
        """Restrict playback to the given origin."""
        ...

    def require_signed_urls(self, resource_url: str) -> None:
        ...

    def close(self) -> None:
        ...


def _check_origins(origins: str) -> None:
    if "/" in origins:
        raise InvalidOrigins(f"Origins must be hostnames, got: {origins}")


class CloudflareStreamClient:
    """
    Client for the Cloudflare Stream API.

    Holds one requests.Session, so connections are reused between
    calls. The session is not meant to be shared between threads:
    build one client per concurrent context.
    """

    def __init__(
        self,
        credentials: Credentials,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._credentials = credentials
        self._api_base_url = api_base_url
        self._timeout = timeout
        self._session = session or requests.Session()

        logger.info(
            "Initialized Cloudflare Stream client",
            extra={
                "email": credentials.email,
                "account": credentials.account,
                "zone": credentials.zone,
            }
        )

    def __enter__(self) -> "CloudflareStreamClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    @property
    def media_endpoint(self) -> str:
        return self._credentials.media_endpoint(self._api_base_url)

    def status(self, resource_url: str) -> Any:
        """
        Get the status of a video.

        Only the transport's own error reporting applies here: a 4xx/5xx
        raises requests.HTTPError rather than OperationFailed.
        """
        response = self._request(
            "GET",
            resource_url,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()

        return response.json()

    def upload(self, filepath: Union[str, Path]) -> str:
        """
        Upload a video file and return the URL that manages it.

        Two steps, following the TUS protocol:
        1. POST to the media endpoint creates the upload (201 + Location)
        2. PATCH the file bytes to that location (204)

        If step 2 fails the created resource is left behind on
        Cloudflare; nothing here deletes it.
        """
        with open_upload(filepath) as handle:
            location = self.create_resource(handle.filename, handle.size)
            self.send_bytes(location, handle.stream, handle.size)

        logger.info(
            "Uploaded video",
            extra={
                "video_filename": handle.filename,
                "size_bytes": handle.size,
                "resource_url": location,
            }
        )

        return location

    def create_resource(self, filename: str, filesize: int) -> str:
        """
        Create an upload on Cloudflare Stream.

        Returns the Location header, which identifies the video from
        here on.
        """
        if not filename or not filesize:
            raise InvalidFile("Filename and a non-zero filesize are required")

        response = self._request(
            "POST",
            self.media_endpoint,
            headers={
                "Content-Length": "0",
                "Tus-Resumable": TUS_VERSION,
                "Upload-Length": str(filesize),
                "Upload-Metadata": encode_upload_metadata(filename),
            },
        )
        self._expect(response, 201, "create_resource")

        location = response.headers.get("Location")
        if not location:
            logger.error(
                "Upload created without a Location header",
                extra={"video_filename": filename}
            )
            raise OperationFailed(
                "create_resource",
                status_code=response.status_code,
                body=response.text,
            )

        return location

    def send_bytes(
        self,
        location: str,
        stream: Optional[BinaryIO],
        filesize: int,
    ) -> None:
        """
        Send the whole file to a created upload.

        Always starts at offset 0; partial uploads are not resumed.
        """
        if stream is None:
            raise InvalidFile("A readable stream is required")

        response = self._request(
            "PATCH",
            location,
            headers={
                "Content-Length": str(filesize),
                "Content-Type": "application/offset+octet-stream",
                "Tus-Resumable": TUS_VERSION,
                "Upload-Offset": "0",
            },
            data=stream,
        )
        self._expect(response, 204, "send_bytes")

    def delete(self, resource_url: str) -> None:
        """Delete a video from Cloudflare Stream."""
        response = self._request(
            "DELETE",
            resource_url,
            headers={"Content-Length": "0"},
        )
        self._expect(response, 204, "delete")

        logger.info("Deleted video", extra={"resource_url": resource_url})

    def code(self, resource_url: str) -> str:
        """Get the HTML embed code for a video."""
        response = self._request(
            "GET",
            f"{resource_url.rstrip('/')}/embed",
            headers={"Content-Type": "application/json"},
        )
        self._expect(response, 200, "code")

        return response.text

    def allow(self, resource_url: str, origins: str) -> None:
        """
        Set allowedOrigins on a video.

        origins is sent as a single entry: "a.com,b.com" is one origin
        as far as this call is concerned.
        """
        _check_origins(origins)

        response = self._request(
            "POST",
            resource_url,
            json={
                "uid": resource_uid(resource_url),
                "allowedOrigins": [origins],
            },
        )
        self._expect(response, 200, "allow")

    def require_signed_urls(self, resource_url: str) -> None:
        """Require signed URLs for playback of a video."""
        response = self._request(
            "POST",
            resource_url,
            json={
                "uid": resource_uid(resource_url),
                "requireSignedURLs": True,
            },
        )
        self._expect(response, 200, "require_signed_urls")

    def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Send an authenticated request."""
        all_headers = dict(self._credentials.auth_headers)
        if headers:
            all_headers.update(headers)

        logger.debug("Sending Stream request", extra={"method": method, "url": url})

        return self._session.request(
            method,
            url,
            headers=all_headers,
            timeout=self._timeout,
            **kwargs,
        )

    def _expect(
        self,
        response: requests.Response,
        expected_status: int,
        operation: str,
    ) -> None:
        if response.status_code == expected_status:
            return

        logger.error(
            "Unexpected Stream response",
            extra={
                "operation": operation,
                "url": response.url,
                "status_code": response.status_code,
                "expected_status": expected_status,
            }
        )
        raise OperationFailed(
            operation,
            status_code=response.status_code,
            expected_status=expected_status,
            body=response.text,
        )


# ---------------------------------------------------------------------------
# Mock Client for Local Development
# ---------------------------------------------------------------------------

class MockStreamClient:
    """
    In-memory Stream client for local development.

    Videos live in a dict keyed by uid and resource URLs look like
    mock://stream/<uid>. Input validation matches the real client, so
    invalid files and origins fail the same way.
    """

    URL_PREFIX = "mock://stream/"

    def __init__(self) -> None:
        self._videos: dict[str, dict[str, Any]] = {}
        logger.info("Initialized mock Stream client (in-memory)")

    def __enter__(self) -> "MockStreamClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        pass

    def status(self, resource_url: str) -> Any:
        video = self._get(resource_url, "status")
        return {
            "success": True,
            "errors": [],
            "messages": [],
            "result": {
                "uid": video["uid"],
                "readyToStream": video["size"] > 0,
                "size": video["size"],
                "meta": {"filename": video["filename"]},
                "allowedOrigins": list(video["allowed_origins"]),
                "requireSignedURLs": video["require_signed_urls"],
                "status": {"state": "ready" if video["size"] else "pendingupload"},
            },
        }

    def upload(self, filepath: Union[str, Path]) -> str:
        with open_upload(filepath) as handle:
            location = self.create_resource(handle.filename, handle.size)
            self.send_bytes(location, handle.stream, handle.size)
        return location

    def create_resource(self, filename: str, filesize: int) -> str:
        if not filename or not filesize:
            raise InvalidFile("Filename and a non-zero filesize are required")

        uid = uuid4().hex
        self._videos[uid] = {
            "uid": uid,
            "filename": filename,
            "upload_length": filesize,
            "size": 0,
            "allowed_origins": [],
            "require_signed_urls": False,
        }

        logger.debug(
            "Created upload in mock Stream",
            extra={"uid": uid, "video_filename": filename, "size_bytes": filesize}
        )

        return f"{self.URL_PREFIX}{uid}"

    def send_bytes(
        self,
        location: str,
        stream: Optional[BinaryIO],
        filesize: int,
    ) -> None:
        if stream is None:
            raise InvalidFile("A readable stream is required")

        video = self._get(location, "send_bytes")
        video["size"] = len(stream.read())

    def delete(self, resource_url: str) -> None:
        video = self._get(resource_url, "delete")
        del self._videos[video["uid"]]

    def code(self, resource_url: str) -> str:
        video = self._get(resource_url, "code")
        return f'<stream src="{video["uid"]}" controls></stream>'

    def allow(self, resource_url: str, origins: str) -> None:
        _check_origins(origins)
        video = self._get(resource_url, "allow")
        video["allowed_origins"] = [origins]

    def require_signed_urls(self, resource_url: str) -> None:
        video = self._get(resource_url, "require_signed_urls")
        video["require_signed_urls"] = True

    def _get(self, resource_url: str, operation: str) -> dict[str, Any]:
        uid = resource_uid(resource_url)
        if uid not in self._videos:
            raise OperationFailed(operation, status_code=404, body=f"Video not found: {uid}")
        return self._videos[uid]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_stream_client(
    credentials: Optional[Credentials] = None,
    mock_mode: bool = False,
    api_base_url: str = DEFAULT_API_BASE_URL,
    timeout: Optional[float] = None,
) -> StreamClient:
    """
    Create a Stream client.

    Args:
        credentials: Cloudflare credentials (required if not mock_mode)
        mock_mode: If True, return the in-memory client
        api_base_url: Cloudflare API root, overridable for proxies
        timeout: Per-request timeout in seconds; None waits forever

    Returns:
        StreamClient implementation (Cloudflare or Mock)
    """
    if mock_mode:
        return MockStreamClient()

    if credentials is None:
        raise ValueError("credentials are required when not in mock mode")

    return CloudflareStreamClient(
        credentials,
        api_base_url=api_base_url,
        timeout=timeout,
    )
