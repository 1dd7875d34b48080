import logging
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from secretflare.exceptions import MalformedResponseError
from secretflare.models.deployment import Deployment
from secretflare.models.version import ScriptSettings, VersionDetails, WorkerVersion
from secretflare.versions.content import RawContent, classify_content

from .transport import AsyncSecretflareTransport

__all__ = ["VersionReader"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_versions_adapter = TypeAdapter(list[WorkerVersion])
_deployments_adapter = TypeAdapter(list[Deployment])


def _validate(model: type[ModelT], payload: Any, path: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected response from {path}: {e}") from e


class VersionReader:
    """
    Read-only access to a script's versions, settings and content.

    Every method is a single independent request.
    """

    def __init__(self, transport: AsyncSecretflareTransport) -> None:
        self.transport = transport

    @staticmethod
    def _script_path(account_id: str, script_name: str) -> str:
        return f"/accounts/{account_id}/workers/scripts/{script_name}"

    async def get_version(
        self, account_id: str, script_name: str, version_id: str
    ) -> VersionDetails:
        path = f"{self._script_path(account_id, script_name)}/versions/{version_id}"
        return _validate(VersionDetails, await self.transport.fetch_json(path), path)

    async def get_script_settings(self, account_id: str, script_name: str) -> ScriptSettings:
        path = f"{self._script_path(account_id, script_name)}/script-settings"
        return _validate(ScriptSettings, await self.transport.fetch_json(path), path)

    async def get_content(self, account_id: str, script_name: str, version_id: str) -> RawContent:
        """Fetch the code of a version, classified by its content encoding."""
        path = f"{self._script_path(account_id, script_name)}/content/v2"
        response = await self.transport.fetch_raw(path, params={"version": version_id})
        content = classify_content(response.headers, response.content)
        logger.debug(
            "Fetched content of %s@%s as %s", script_name, version_id, type(content).__name__
        )
        return content

    async def list_versions(self, account_id: str, script_name: str) -> list[WorkerVersion]:
        """List uploaded versions, newest first."""
        path = f"{self._script_path(account_id, script_name)}/versions"
        result = await self.transport.fetch_json(path)
        items = result.get("items", []) if isinstance(result, dict) else result
        try:
            return _versions_adapter.validate_python(items or [])
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected response from {path}: {e}") from e

    async def list_deployments(self, account_id: str, script_name: str) -> list[Deployment]:
        """List deployments, newest first."""
        path = f"{self._script_path(account_id, script_name)}/deployments"
        result = await self.transport.fetch_json(path)
        items = result.get("deployments", []) if isinstance(result, dict) else result
        try:
            return _deployments_adapter.validate_python(items or [])
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected response from {path}: {e}") from e
