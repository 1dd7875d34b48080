from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from secretflare.constants import API_BASE_URL, DEFAULT_REQUEST_TIMEOUT

__all__ = ["Config"]


class Config(BaseSettings):
    """
    Configuration settings for Secretflare.

    Loaded from environment variables with 'SECRETFLARE_' prefix or a .env file.
    """

    account_id: str
    """Cloudflare account ID."""

    api_token: SecretStr
    """Cloudflare API token."""

    script_name: str | None = None
    """Default Worker name when --name is not passed."""

    api_base_url: str = API_BASE_URL
    """Base URL of the Cloudflare v4 API."""

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    """Timeout in seconds applied to every API request."""

    send_metrics: bool = True
    """Whether publish requests report usage metrics."""

    model_config = SettingsConfigDict(
        env_prefix="SECRETFLARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
