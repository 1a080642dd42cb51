"""
Application configuration using Pydantic settings.

Configuration comes from environment variables with sensible defaults.
Supports mock mode for local development.
"""

from .settings import Settings, create_stream_client_from_settings, get_settings

__all__ = ["Settings", "create_stream_client_from_settings", "get_settings"]
