"""
Cloudflare Stream integration.

Uploads over TUS, plus status, delete, embed code and playback
restrictions. Includes mock mode for local development without
credentials.
"""

from .client import (
    CloudflareStreamClient,
    MockStreamClient,
    StreamClient,
    create_stream_client,
)

__all__ = [
    "CloudflareStreamClient",
    "MockStreamClient",
    "StreamClient",
    "create_stream_client",
]
