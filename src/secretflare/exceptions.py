"""Errors raised while reading, rebuilding and publishing Worker versions."""

from typing import Any

__all__ = [
    "ApiResponseError",
    "MalformedResponseError",
    "NotFoundError",
    "PublishRejectedError",
    "SecretflareError",
    "TransportError",
    "UnsupportedArtifactError",
]


class SecretflareError(Exception):
    """Base class for every error surfaced by the rotation pipeline."""


class ApiResponseError(SecretflareError):
    """
    An error that may carry the API's diagnostic payload.

    `status_code` and `errors` are only set when the server answered.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class NotFoundError(ApiResponseError):
    """The script or version does not exist."""


class TransportError(ApiResponseError):
    """A network or HTTP-level failure talking to the Cloudflare API."""


class PublishRejectedError(ApiResponseError):
    """The server refused to create the new version."""


class MalformedResponseError(SecretflareError):
    """The server response does not follow the expected content contract."""


class UnsupportedArtifactError(SecretflareError):
    """The Worker has a shape this pipeline deliberately does not handle."""
