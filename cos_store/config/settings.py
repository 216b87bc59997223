"""
Configuration using Pydantic settings.

Two settings classes live here:
- Settings: the FastAPI host application (title, API keys, logging, CORS)
- CosSettings: the storage adapter itself

Adapter values are resolved from GHOST_STORAGE_ADAPTER_COS_* environment
variables first, then from the config object the host CMS hands to the
adapter, then from the defaults below. Resolution is pure: nothing here
touches the network.
"""

from functools import lru_cache
from typing import Any, Mapping, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Public endpoint suffix for COS buckets
COS_DEFAULT_DOMAIN = "myqcloud.com"

# Host CMS config objects use camelCase keys
_CONFIG_KEYS = {
    "secretId": "secret_id",
    "secretKey": "secret_key",
    "bucket": "bucket",
    "region": "region",
    "pathPrefix": "path_prefix",
    "domain": "domain",
    "protocol": "protocol",
    "assetHost": "asset_host",
    "privateStorage": "private_storage",
    "debug": "debug",
    "endpointUrl": "endpoint_url",
    "mockMode": "mock_mode",
}


class Settings(BaseSettings):
    """
    Host application settings loaded from environment variables.

    For lists (like api_keys), use comma-separated values in env.
    """

    api_title: str = "COS Storage Adapter"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1",
        description="Comma-separated API keys accepted for upload and delete."
    )

    max_upload_size_mb: int = Field(
        default=20,
        description="Maximum upload size in MB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:2368",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

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


class CosSettings(BaseSettings):
    """
    Storage adapter configuration.

    Immutable once built. The environment wins over the config object,
    so an operator can override a deployed config without editing it.
    Empty environment values are ignored and fall through.
    """

    # COS credentials - required
    secret_id: str = Field(default="", description="Tencent Cloud SecretId")
    secret_key: str = Field(default="", description="Tencent Cloud SecretKey")

    # COS bucket - required
    bucket: str = Field(default="", description="Bucket name including the APPID suffix")
    region: str = Field(default="", description="Bucket region, e.g. ap-guangzhou")

    # Optional
    path_prefix: str = Field(
        default="",
        description="Subdirectory under which every object key is stored"
    )
    domain: str = Field(default="", description="Custom domain bound to the bucket")
    protocol: str = Field(default="https:", description="URL scheme used for built hosts")
    asset_host: Optional[str] = Field(
        default=None,
        description="Explicit URL host for returned asset URLs (CDN). Overrides domain."
    )
    private_storage: bool = Field(
        default=False,
        description="Private bucket: return relative URLs so reads go through serve()"
    )
    debug: bool = Field(default=False, description="Verbose adapter logging")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="S3-compatible API endpoint. Defaults to https://cos.{region}.myqcloud.com"
    )
    mock_mode: bool = Field(
        default=False,
        description="Use in-memory storage instead of COS. Enables local dev without a bucket."
    )

    model_config = SettingsConfigDict(
        env_prefix="GHOST_STORAGE_ADAPTER_COS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment first, then the host's config object
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("path_prefix")
    @classmethod
    def _strip_leading_slash(cls, value: str) -> str:
        return value.lstrip("/")

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None) -> "CosSettings":
        """
        Build settings from a host CMS config object.

        Accepts the camelCase keys the CMS config file uses (secretId,
        pathPrefix, assetHost, ...) as well as our snake_case field names.
        Unknown keys are ignored.
        """
        kwargs = {}
        for key, value in (config or {}).items():
            field_name = _CONFIG_KEYS.get(key, key)
            if field_name in cls.model_fields and value is not None:
                kwargs[field_name] = value
        return cls(**kwargs)

    @property
    def host(self) -> Optional[str]:
        """
        URL host prefixed to object keys in returned asset URLs.

        None (not an empty string) when private storage is on and no
        asset host was given: that is the signal to hand out relative
        URLs, which the CMS routes through serve().
        """
        asset_host = (self.asset_host or "").strip()
        if self.private_storage and not asset_host:
            return None
        if asset_host:
            return asset_host.rstrip("/")
        if self.domain:
            return f"{self.protocol}//{self.domain}"
        return f"{self.protocol}//{self.bucket}.cos.{self.region}.{COS_DEFAULT_DOMAIN}"

    @property
    def endpoint(self) -> str:
        """S3-compatible API endpoint for the configured region."""
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://cos.{self.region}.{COS_DEFAULT_DOMAIN}"

    def validate_required_fields(self) -> list[str]:
        """
        Return the environment variable names of missing required fields.

        Nothing is required in mock mode.
        """
        if self.mock_mode:
            return []

        prefix = "GHOST_STORAGE_ADAPTER_COS_"
        missing = []
        for field_name in ("secret_id", "secret_key", "bucket", "region"):
            if not getattr(self, field_name):
                missing.append(prefix + field_name.upper())
        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()


@lru_cache()
def get_cos_settings() -> CosSettings:
    """Get cached adapter settings (environment only, no config object)."""
    return CosSettings()
