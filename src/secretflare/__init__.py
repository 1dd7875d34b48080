"""Secretflare - Cloudflare Worker secret rotation through versions."""

from .client.transport import AsyncSecretflareTransport
from .versions.secrets import put_secret, put_secrets_bulk, rotate_secrets

__all__ = [
    "AsyncSecretflareTransport",
    "__version__",
    "put_secret",
    "put_secrets_bulk",
    "rotate_secrets",
]

__version__ = "0.1.0"
