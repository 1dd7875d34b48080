"""Authenticated access to the Cloudflare v4 API over httpx."""

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, NoReturn

import httpx

from secretflare.constants import API_BASE_URL, DEFAULT_REQUEST_TIMEOUT, NOT_FOUND_ERROR_CODES
from secretflare.exceptions import MalformedResponseError, NotFoundError, TransportError

if TYPE_CHECKING:
    from secretflare.models.config import Config

__all__ = ["AsyncSecretflareTransport"]

logger = logging.getLogger(__name__)


def _format_errors(errors: list[dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        message = error.get("message", "Unknown error")
        code = error.get("code")
        parts.append(f"{message} [code: {code}]" if code is not None else str(message))
    return "; ".join(parts)


def _response_errors(response: httpx.Response) -> list[dict[str, Any]]:
    try:
        payload = response.json()
    except ValueError:
        return []
    if not isinstance(payload, dict):
        return []
    errors = payload.get("errors") or []
    return [e for e in errors if isinstance(e, dict)]


class AsyncSecretflareTransport:
    """
    Thin async wrapper around `httpx.AsyncClient` for the Cloudflare API.

    Handles authentication, unwraps the `{success, errors, result}` envelope
    and maps failures onto the package's error types. Nothing is retried.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = API_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        send_metrics: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.send_metrics = send_metrics
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_token}"},
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: "Config", transport: httpx.AsyncBaseTransport | None = None
    ) -> "AsyncSecretflareTransport":
        return cls(
            api_token=config.api_token.get_secret_value(),
            base_url=config.api_base_url,
            timeout=config.request_timeout,
            send_metrics=config.send_metrics,
            transport=transport,
        )

    async def __aenter__(self) -> "AsyncSecretflareTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        files: Sequence[tuple[str, Any]] | None = None,
    ) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            return await self._client.request(
                method, path, params=params, headers=headers, files=files
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

    def _raise_for_response(self, path: str, response: httpx.Response) -> NoReturn:
        errors = _response_errors(response)
        detail = _format_errors(errors) or response.reason_phrase
        codes = {e.get("code") for e in errors}
        if response.status_code == 404 or codes & NOT_FOUND_ERROR_CODES:
            raise NotFoundError(
                f"Not found: {path}. {detail}",
                status_code=response.status_code,
                errors=errors,
            )
        raise TransportError(
            f"A request to the Cloudflare API ({path}) failed with status "
            f"{response.status_code}. {detail}",
            status_code=response.status_code,
            errors=errors,
        )

    async def fetch_json(
        self,
        path: str,
        *,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        files: Sequence[tuple[str, Any]] | None = None,
    ) -> Any:
        """
        Issue a request and return the `result` member of the API envelope.

        Raises:
            NotFoundError: On 404 or a not-found API error code.
            TransportError: On network failure or any other unsuccessful response.
            MalformedResponseError: If a successful response is not a JSON envelope.
        """
        response = await self._send(method, path, params=params, headers=headers, files=files)
        if response.is_error:
            self._raise_for_response(path, response)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Expected a JSON response from {path}") from e

        if not isinstance(payload, dict) or "success" not in payload:
            raise MalformedResponseError(f"Unexpected response envelope from {path}")
        if not payload["success"]:
            self._raise_for_response(path, response)
        return payload.get("result")

    async def fetch_raw(
        self, path: str, *, params: Mapping[str, str] | None = None
    ) -> httpx.Response:
        """Issue a GET and return the undecoded response after checking its status."""
        response = await self._send("GET", path, params=params)
        if response.is_error:
            self._raise_for_response(path, response)
        return response
