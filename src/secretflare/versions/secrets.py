"""
Secret rotation by copying a Worker version.

A version's secrets cannot be changed in place. Instead the version is read
back in full (metadata, content, script settings), rebuilt with the new
secret set and uploaded as a brand-new version. Nothing is written to the
API until the final upload, so a failure at any stage leaves no trace.
"""

import logging
from collections.abc import Iterable, Mapping

from pydantic import SecretStr

from secretflare.client.reader import VersionReader
from secretflare.client.transport import AsyncSecretflareTransport
from secretflare.exceptions import NotFoundError
from secretflare.models.binding import Secret
from secretflare.models.upload import PublishResult

from .assembler import assemble_version
from .bindings import merge_bindings
from .content import decode_content
from .upload import publish_version

__all__ = ["latest_version_id", "put_secret", "put_secrets_bulk", "rotate_secrets"]

logger = logging.getLogger(__name__)


async def rotate_secrets(
    transport: AsyncSecretflareTransport,
    account_id: str,
    script_name: str,
    version_id: str,
    secrets: Iterable[Secret],
    message: str | None = None,
    tag: str | None = None,
    send_metrics: bool | None = None,
) -> PublishResult:
    """
    Publish a copy of `version_id` whose secrets are replaced by `secrets`.

    Secrets of the source version that are not in `secrets` are inherited by
    the new version. Every other property of the source version is kept.

    Raises:
        NotFoundError: If the script or version does not exist.
        UnsupportedArtifactError: If the Worker uses Workers Sites.
        MalformedResponseError: If the content response cannot be decoded.
        PublishRejectedError: If the API refuses the new version.
        TransportError: On network failure.
    """
    secrets = list(secrets)
    reader = VersionReader(transport)

    details = await reader.get_version(account_id, script_name, version_id)
    raw_content = await reader.get_content(account_id, script_name, version_id)
    settings = await reader.get_script_settings(account_id, script_name)

    modules = decode_content(raw_content)
    bindings = merge_bindings(details.resources.bindings, secrets)
    request = assemble_version(
        script_name,
        details,
        settings,
        modules,
        bindings,
        message=message,
        tag=tag,
    )

    logger.info(
        "Copying version %s of %s with secrets: %s",
        version_id,
        script_name,
        ", ".join(secret.name for secret in secrets) or "(none)",
    )
    return await publish_version(
        transport, account_id, script_name, request, send_metrics=send_metrics
    )


async def latest_version_id(
    transport: AsyncSecretflareTransport, account_id: str, script_name: str
) -> str:
    versions = await VersionReader(transport).list_versions(account_id, script_name)
    if not versions:
        raise NotFoundError(
            "There are currently no uploaded versions of this Worker - "
            "please upload a version before uploading a secret."
        )
    return versions[0].id


async def put_secret(
    transport: AsyncSecretflareTransport,
    account_id: str,
    script_name: str,
    name: str,
    value: str,
    message: str | None = None,
    tag: str | None = None,
    send_metrics: bool | None = None,
) -> PublishResult:
    """Create a new version of the latest upload with one secret set."""
    version_id = await latest_version_id(transport, account_id, script_name)
    return await rotate_secrets(
        transport,
        account_id,
        script_name,
        version_id,
        [Secret(name=name, value=SecretStr(value))],
        message=message if message is not None else f'Updated secret "{name}"',
        tag=tag,
        send_metrics=send_metrics,
    )


async def put_secrets_bulk(
    transport: AsyncSecretflareTransport,
    account_id: str,
    script_name: str,
    secrets: Mapping[str, str],
    message: str | None = None,
    tag: str | None = None,
    send_metrics: bool | None = None,
) -> PublishResult:
    """Create a new version of the latest upload with several secrets set."""
    version_id = await latest_version_id(transport, account_id, script_name)
    return await rotate_secrets(
        transport,
        account_id,
        script_name,
        version_id,
        [Secret(name=name, value=SecretStr(value)) for name, value in secrets.items()],
        message=message if message is not None else f"Bulk updated {len(secrets)} secrets",
        tag=tag,
        send_metrics=send_metrics,
    )
