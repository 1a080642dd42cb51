"""
Value types for talking to Cloudflare Stream.

These have no dependency on the HTTP transport. The client builds
requests out of them, the settings layer builds Credentials from
environment variables, and tests construct them directly.
"""

import base64
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Union
from urllib.parse import urlsplit

from .errors import InvalidCredentials, InvalidFile


DEFAULT_API_BASE_URL = "https://api.cloudflare.com/client/v4"
TUS_VERSION = "1.0.0"


@dataclass(frozen=True)
class Credentials:
    """
    Authentication for the Cloudflare API.

    Frozen and validated once: a Credentials instance that exists is
    always usable. Either account or zone selects the media endpoint,
    so at least one of them must be set.
    """
    key: str = field(repr=False)
    email: str
    account: str = ""
    zone: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise InvalidCredentials("API key is required")
        if not self.email:
            raise InvalidCredentials("Account email is required")
        if not self.account and not self.zone:
            raise InvalidCredentials("Either an account or a zone identifier is required")

    @property
    def auth_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {
            "X-Auth-Key": self.key,
            "X-Auth-Email": self.email,
        }

    def media_endpoint(self, base_url: str = DEFAULT_API_BASE_URL) -> str:
        """
        URL that new uploads are created against.

        Zone-scoped when a zone is configured, account-scoped otherwise.
        """
        base = base_url.rstrip("/")
        if self.zone:
            return f"{base}/zones/{self.zone}/media"
        return f"{base}/account/{self.account}/media"


@dataclass(frozen=True)
class UploadHandle:
    """An open video file, valid for the duration of one upload."""
    stream: BinaryIO
    size: int
    filename: str


@contextmanager
def open_upload(filepath: Union[str, Path]) -> Iterator[UploadHandle]:
    """
    Open a file for upload and close it afterwards.

    Usage:
        with open_upload("/tmp/video.mp4") as handle:
            client.send_bytes(location, handle.stream, handle.size)
    """
    path = Path(filepath)

    try:
        stream = open(path, "rb")
    except OSError as e:
        raise InvalidFile(f"Cannot open {path}: {e}") from e

    try:
        size = os.fstat(stream.fileno()).st_size
        yield UploadHandle(stream=stream, size=size, filename=path.name)
    finally:
        stream.close()


def resource_uid(resource_url: str) -> str:
    """
    Video identifier of a resource URL: its last path segment.

    >>> resource_uid("https://api.cloudflare.com/client/v4/zones/z/media/abc123")
    'abc123'
    """
    path = urlsplit(resource_url).path.rstrip("/")
    return path.rsplit("/", 1)[-1]


def encode_upload_metadata(filename: str) -> str:
    """TUS Upload-Metadata header value; values are base64 encoded."""
    encoded = base64.b64encode(filename.encode("utf-8")).decode("ascii")
    return f"filename {encoded}"
