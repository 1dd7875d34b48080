"""Encoding of a new-version definition into the upload form and publishing it."""

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from secretflare.client.transport import AsyncSecretflareTransport
from secretflare.constants import KEEP_SECRET_BINDINGS, KEEP_VAR_BINDINGS, METRICS_HEADER
from secretflare.exceptions import (
    MalformedResponseError,
    NotFoundError,
    PublishRejectedError,
    TransportError,
)
from secretflare.models.module import ModuleKind
from secretflare.models.upload import NewVersionRequest, PublishResult

__all__ = [
    "build_metadata",
    "build_upload_form",
    "encode_upload_form",
    "metrics_usage_headers",
    "publish_version",
]

logger = logging.getLogger(__name__)

PUBLISH_PARAMS = {
    "include_subdomain_availability": "true",
    # keep the script body out of the response
    "excludeScript": "true",
}


def build_metadata(request: NewVersionRequest) -> dict[str, Any]:
    """Build the JSON document sent as the `metadata` part of the upload."""
    main = request.modules.entrypoint
    metadata: dict[str, Any] = {}

    # Service Workers name their script as a body part, modules as a main module
    if main.kind == ModuleKind.COMMONJS:
        metadata["body_part"] = main.name
    else:
        metadata["main_module"] = main.name

    metadata["bindings"] = [binding.model_dump() for binding in request.bindings]

    if request.compatibility_date is not None:
        metadata["compatibility_date"] = request.compatibility_date
    if request.compatibility_flags is not None:
        metadata["compatibility_flags"] = list(request.compatibility_flags)
    if request.usage_model is not None:
        metadata["usage_model"] = request.usage_model

    keep_bindings: list[str] = []
    if request.keep_vars:
        keep_bindings.extend(KEEP_VAR_BINDINGS)
    if request.keep_secrets:
        keep_bindings.extend(KEEP_SECRET_BINDINGS)
    if keep_bindings:
        metadata["keep_bindings"] = keep_bindings

    if request.logpush is not None:
        metadata["logpush"] = request.logpush
    if request.placement is not None:
        metadata["placement"] = request.placement.model_dump()
    if request.tail_consumers is not None:
        metadata["tail_consumers"] = [
            consumer.model_dump(exclude_none=True) for consumer in request.tail_consumers
        ]
    if request.limits is not None:
        metadata["limits"] = request.limits.model_dump(exclude_none=True)

    annotations = request.annotations.model_dump(by_alias=True, exclude_none=True)
    if annotations:
        metadata["annotations"] = annotations

    return metadata


def build_upload_form(request: NewVersionRequest) -> list[tuple[str, Any]]:
    """
    Build the multipart form as an httpx `files` sequence.

    The metadata part comes first, then the entrypoint, then the other modules
    in their original order.
    """
    metadata = json.dumps(build_metadata(request)).encode("utf-8")
    form: list[tuple[str, Any]] = [("metadata", (None, metadata, "application/json"))]
    for module in (request.modules.entrypoint, *request.modules.modules):
        form.append((module.name, (module.name, module.content, module.kind.mime_type)))
    return form


def encode_upload_form(request: NewVersionRequest) -> tuple[bytes, str]:
    """Render the upload form to raw bytes, returning them with their content type."""
    rendered = httpx.Request("POST", "https://upload.invalid", files=build_upload_form(request))
    return rendered.read(), rendered.headers["content-type"]


def metrics_usage_headers(send_metrics: bool) -> dict[str, str]:
    return {METRICS_HEADER: "true" if send_metrics else "false"}


async def publish_version(
    transport: AsyncSecretflareTransport,
    account_id: str,
    script_name: str,
    request: NewVersionRequest,
    send_metrics: bool | None = None,
) -> PublishResult:
    """
    Upload `request` as a brand-new version of `script_name`.

    Args:
        transport: Authenticated API transport.
        account_id: Cloudflare account ID.
        script_name: Name of the Worker.
        request: The assembled version definition.
        send_metrics: Report usage metrics; defaults to the transport's setting.

    Returns:
        The identifiers of the created version.

    Raises:
        PublishRejectedError: If the API answers with anything but success.
        TransportError: If the request never got an answer.
    """
    if send_metrics is None:
        send_metrics = transport.send_metrics

    path = f"/accounts/{account_id}/workers/scripts/{script_name}/versions"
    try:
        result = await transport.fetch_json(
            path,
            method="POST",
            params=PUBLISH_PARAMS,
            headers=metrics_usage_headers(send_metrics),
            files=build_upload_form(request),
        )
    except (NotFoundError, TransportError) as e:
        if e.status_code is None:
            raise
        raise PublishRejectedError(
            f"Failed to create a new version of {script_name}: {e}",
            status_code=e.status_code,
            errors=e.errors,
        ) from e

    try:
        published = PublishResult.model_validate(result)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected publish response for {script_name}") from e

    logger.info("Created version %s of %s", published.id, script_name)
    return published
