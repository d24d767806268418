"""
Gateway configuration.

Every field maps to an environment variable of the same name (case
insensitive), optionally read from a .env file. Values are validated once
at startup by pydantic.

With R2_MOCK_MODE=true the gateway runs against an in-memory store and
needs no credentials at all.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Environment-driven settings for the object gateway.

    List-valued options (api_keys, cors_origins) are comma-separated strings
    so they can be set from a single environment variable.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- HTTP surface -------------------------------------------------------
    api_title: str = "R2 Object Gateway"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="API keys accepted in the X-API-Key header, comma-separated."
    )
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins, comma-separated, or * to allow any."
    )

    # --- Cloudflare R2 ------------------------------------------------------
    r2_account_id: str = Field(
        default="",
        description="Cloudflare account ID; used to build the endpoint URL"
    )
    r2_access_key_id: str = ""
    r2_secret_access_key: str = ""
    r2_endpoint_url: Optional[str] = Field(
        default=None,
        description="Explicit S3 endpoint, e.g. for MinIO. Overrides r2_account_id."
    )
    r2_region: str = Field(
        default="auto",
        description="Signing region. R2 accepts only 'auto'."
    )
    r2_connect_timeout_seconds: int = 30
    r2_read_timeout_seconds: int = Field(
        default=120,
        description="Socket read timeout; large downloads stream within it."
    )
    r2_mock_mode: bool = Field(
        default=False,
        description="Serve requests from an in-memory store instead of R2."
    )

    # --- Downloads saved to file --------------------------------------------
    download_temp_prefix: str = Field(
        default="r2download_",
        description="Name prefix of files created for downloads without a destination."
    )
    download_temp_dir: Optional[str] = Field(
        default=None,
        description="Where those files are created. The system temp dir when unset."
    )

    log_level: str = "INFO"

    @property
    def api_keys_list(self) -> list[str]:
        return _split_csv(self.api_keys)

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return _split_csv(self.cors_origins)

    @property
    def r2_endpoint(self) -> str:
        """The explicit endpoint if set, otherwise the account's R2 endpoint."""
        if self.r2_endpoint_url:
            return self.r2_endpoint_url
        return R2_ENDPOINT_TEMPLATE.format(account_id=self.r2_account_id)

    def validate_required_fields(self) -> list[str]:
        """
        Names of the environment variables that still need a value.

        Empty in mock mode. Reported at startup and by the readiness probe
        rather than raised, so the service can come up and explain itself.
        """
        if self.r2_mock_mode:
            return []

        missing = []
        if not (self.r2_account_id or self.r2_endpoint_url):
            missing.append("R2_ACCOUNT_ID or R2_ENDPOINT_URL")
        if not self.r2_access_key_id:
            missing.append("R2_ACCESS_KEY_ID")
        if not self.r2_secret_access_key:
            missing.append("R2_SECRET_ACCESS_KEY")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings. Tests reset with get_settings.cache_clear()."""
    return Settings()
