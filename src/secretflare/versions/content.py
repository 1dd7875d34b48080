"""
Decoding of the "get version content" response into a module set.

The API answers in one of two shapes. Modular Workers come back as
`multipart/form-data`, one part per module, with the entrypoint named by the
`cf-entrypoint` header. Service Workers come back as a single script body.
The shape is decided once, in `classify_content`, and everything after that
works on the resulting `MultipartContent` or `SingleBodyContent`.
"""

import email.policy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from email.parser import BytesParser

import httpx

from secretflare.constants import (
    DEFAULT_SERVICE_WORKER_FILENAME,
    ENTRYPOINT_HEADER,
    STATIC_CONTENT_MANIFEST,
)
from secretflare.exceptions import MalformedResponseError, UnsupportedArtifactError
from secretflare.models.module import Module, ModuleSet, classify_content_kind

__all__ = [
    "FormPart",
    "MultipartContent",
    "RawContent",
    "SingleBodyContent",
    "classify_content",
    "decode_content",
    "parse_form_data",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MultipartContent:
    """A modular Worker: one form-data part per module."""

    body: bytes
    content_type: str
    entrypoint: str | None


@dataclass(frozen=True)
class SingleBodyContent:
    """A Service Worker: the body is the whole script."""

    body: bytes
    content_type: str | None


RawContent = MultipartContent | SingleBodyContent


@dataclass(frozen=True)
class FormPart:
    name: str
    content: bytes
    content_type: str


def classify_content(headers: Mapping[str, str], body: bytes) -> RawContent:
    """Pick the content shape from the response headers."""
    headers = httpx.Headers(headers)
    content_type = headers.get("content-type")
    if content_type is not None and content_type.lower().startswith("multipart/form-data"):
        return MultipartContent(
            body=body,
            content_type=content_type,
            entrypoint=headers.get(ENTRYPOINT_HEADER),
        )
    return SingleBodyContent(body=body, content_type=content_type)


def parse_form_data(body: bytes, content_type: str) -> list[FormPart]:
    """
    Split a multipart/form-data body into its parts, in body order.

    Raises:
        MalformedResponseError: If the body is not multipart or a part has no name.
    """
    envelope = b"Content-Type: " + content_type.encode("latin-1") + b"\r\n\r\n" + body
    message = BytesParser(policy=email.policy.HTTP).parsebytes(envelope)
    if not message.is_multipart():
        raise MalformedResponseError("Could not parse multipart/form-data response body")

    parts = []
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            raise MalformedResponseError("Got a form-data part without a name")
        payload = part.get_payload(decode=True)
        parts.append(
            FormPart(
                name=str(name),
                content=payload if isinstance(payload, bytes) else b"",
                content_type=str(part.get("content-type", "")),
            )
        )
    return parts


def _decode_multipart(content: MultipartContent) -> ModuleSet:
    parts = parse_form_data(content.body, content.content_type)

    # Workers Sites is not supported
    if any(part.name == STATIC_CONTENT_MANIFEST for part in parts):
        raise UnsupportedArtifactError(
            "Workers Sites is not supported when updating secrets on a version."
        )

    entrypoint = content.entrypoint
    if entrypoint is None:
        raise MalformedResponseError(f"Got modules without {ENTRYPOINT_HEADER} header")

    entrypoint_part = next((part for part in parts if part.name == entrypoint), None)
    if entrypoint_part is None:
        raise MalformedResponseError("Could not find entrypoint in form-data")

    main_module = Module(
        name=entrypoint_part.name,
        content=entrypoint_part.content,
        kind=classify_content_kind(entrypoint_part.content_type),
    )
    modules = [
        Module(
            name=part.name,
            content=part.content,
            kind=classify_content_kind(part.content_type),
        )
        for part in parts
        if part.name != entrypoint
    ]
    logger.debug("Decoded modular worker %s with %d other modules", entrypoint, len(modules))
    return ModuleSet(entrypoint=main_module, modules=modules)


def _decode_single_body(content: SingleBodyContent) -> ModuleSet:
    if content.content_type is None:
        raise MalformedResponseError(
            "No content-type header was provided for non-module Worker content"
        )

    main_module = Module(
        name=DEFAULT_SERVICE_WORKER_FILENAME,
        content=content.body,
        kind=classify_content_kind(content.content_type),
    )
    logger.debug("Decoded service worker body (%d bytes)", len(content.body))
    return ModuleSet(entrypoint=main_module)


def decode_content(content: RawContent) -> ModuleSet:
    """
    Normalize a version content response into an entrypoint plus auxiliary modules.

    Raises:
        UnsupportedArtifactError: For Workers Sites or unknown module MIME types.
        MalformedResponseError: If the entrypoint cannot be identified.
    """
    if isinstance(content, MultipartContent):
        return _decode_multipart(content)
    return _decode_single_body(content)
