"""
FastAPI dependency injection.

Dependencies provide the settings and the Stream client to route
handlers, so routes never build their own clients and tests can
override them through app.dependency_overrides.
"""

import logging
from typing import Annotated, Generator

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, create_stream_client_from_settings, get_settings
from ..infrastructure.stream.client import StreamClient

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared mock client so uploaded videos survive between requests
_mock_stream_client = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.
    
    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )
    
    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )
    
    return api_key


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_stream_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[StreamClient, None, None]:
    """
    Provide a Stream client for the current request.
    
    A real client is built per request and closed afterwards, which
    keeps its requests.Session out of FastAPI's threadpool sharing.
    In mock mode the same in-memory client is reused across requests.
    
    Raises InvalidCredentials when the CFSTREAM_* settings are incomplete.
    """
    global _mock_stream_client
    
    if settings.cfstream_mock_mode:
        if _mock_stream_client is None:
            _mock_stream_client = create_stream_client_from_settings(settings)
            logger.info("Created shared mock Stream client")
        yield _mock_stream_client
        return
    
    client = create_stream_client_from_settings(settings)
    try:
        yield client
    finally:
        client.close()


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
StreamClientDep = Annotated[StreamClient, Depends(get_stream_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
