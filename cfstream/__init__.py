"""
cfstream - A client for the Cloudflare Stream video API.

This package contains:
- core: Credentials, upload handles and error types
- infrastructure: The HTTP client that talks to Cloudflare Stream
- api: FastAPI routes exposing the client over HTTP
- config: Application configuration
"""

from .core.errors import (
    InvalidCredentials,
    InvalidFile,
    InvalidOrigins,
    OperationFailed,
    StreamError,
)
from .core.models import Credentials
from .infrastructure.stream.client import (
    CloudflareStreamClient,
    MockStreamClient,
    StreamClient,
    create_stream_client,
)

__version__ = "0.1.0"

__all__ = [
    "CloudflareStreamClient",
    "Credentials",
    "InvalidCredentials",
    "InvalidFile",
    "InvalidOrigins",
    "MockStreamClient",
    "OperationFailed",
    "StreamClient",
    "StreamError",
    "create_stream_client",
]
