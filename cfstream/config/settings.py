"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file)
with sensible defaults. The Cloudflare credentials live under the
CFSTREAM_* names; everything else configures the HTTP service.

Mock mode enables local development without a Cloudflare account.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.models import DEFAULT_API_BASE_URL, Credentials
from ..infrastructure.stream.client import StreamClient, create_stream_client


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """
    
    # API Configuration
    api_title: str = "cfstream API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys accepted in the X-API-Key header."
    )
    
    # Cloudflare Stream Configuration
    cfstream_key: str = Field(
        default="",
        description="Cloudflare API key (X-Auth-Key). Required unless in mock mode."
    )
    cfstream_email: str = Field(
        default="",
        description="Email of the Cloudflare account owning the key (X-Auth-Email)."
    )
    cfstream_account: str = Field(
        default="",
        description="Cloudflare account identifier. Used when no zone is set."
    )
    cfstream_zone: str = Field(
        default="",
        description="Cloudflare zone identifier. Takes precedence over the account."
    )
    cfstream_api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Cloudflare API root."
    )
    cfstream_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Per-request timeout. Unset means wait indefinitely."
    )
    cfstream_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of Cloudflare. Enables local dev without an account."
    )
    
    # Application Behavior
    max_upload_size_mb: int = Field(
        default=500,
        description="Maximum video size accepted by the upload endpoint, in MB."
    )
    
    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Case-insensitive."
    )
    
    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept "debug" as well as "DEBUG"."""
        if isinstance(value, str):
            return value.strip().upper()
        return value
    
    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]
    
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    def credentials(self) -> Credentials:
        """
        Build Cloudflare credentials from settings.
        
        Raises InvalidCredentials if the configured values are incomplete.
        """
        return Credentials(
            key=self.cfstream_key,
            email=self.cfstream_email,
            account=self.cfstream_account,
            zone=self.cfstream_zone,
        )
    
    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode.
        
        Returns list of missing required fields.
        """
        missing = []
        
        if self.cfstream_mock_mode:
            return missing
        
        if not self.cfstream_key:
            missing.append("CFSTREAM_KEY")
        if not self.cfstream_email:
            missing.append("CFSTREAM_EMAIL")
        if not self.cfstream_account and not self.cfstream_zone:
            missing.append("CFSTREAM_ACCOUNT or CFSTREAM_ZONE")
        
        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Loaded once per process. For tests, call get_settings.cache_clear()
    to reset.
    """
    return Settings()


def create_stream_client_from_settings(
    settings: Optional[Settings] = None,
) -> StreamClient:
    """
    Create a Stream client configured from environment settings.
    
    Usage:
        client = create_stream_client_from_settings()
        resource_url = client.upload("/path/to/video.mp4")
    """
    settings = settings or get_settings()
    
    if settings.cfstream_mock_mode:
        return create_stream_client(mock_mode=True)
    
    return create_stream_client(
        credentials=settings.credentials(),
        api_base_url=settings.cfstream_api_base_url,
        timeout=settings.cfstream_timeout_seconds,
    )
