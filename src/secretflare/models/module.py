"""Pydantic models for Worker code modules."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from secretflare.constants import MODULE_MIME_TYPES
from secretflare.exceptions import UnsupportedArtifactError

__all__ = ["Module", "ModuleKind", "ModuleSet", "classify_content_kind"]


class ModuleKind(str, Enum):
    """Content kind of a module, as understood by the Workers runtime."""

    ESM = "esm"
    COMMONJS = "commonjs"
    COMPILED_WASM = "compiled-wasm"
    BUFFER = "buffer"
    TEXT = "text"
    PYTHON = "python"
    PYTHON_REQUIREMENT = "python-requirement"
    SOURCE_MAP = "source-map"

    @property
    def mime_type(self) -> str:
        return MODULE_MIME_TYPES[self.value]


def classify_content_kind(mime_type: str) -> ModuleKind:
    """
    Map a MIME type to the module kind it denotes.

    Parameters such as `charset` are ignored.

    Raises:
        UnsupportedArtifactError: If the MIME type matches no module kind.
    """
    essence = mime_type.split(";", 1)[0].strip().lower()
    for kind in ModuleKind:
        if kind.mime_type == essence:
            return kind
    raise UnsupportedArtifactError(f"Unsupported mime type: {mime_type}")


class Module(BaseModel):
    """A named unit of Worker code."""

    model_config = ConfigDict(frozen=True)

    name: str
    """Module name, also used as the upload part name."""

    content: bytes
    """Raw module bytes, kept verbatim so binary modules survive the round trip."""

    kind: ModuleKind
    """Content kind derived from the module's MIME type."""

    file_path: str = ""
    """Source path on disk; empty for modules pulled from the API."""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


class ModuleSet(BaseModel):
    """The entrypoint module plus any auxiliary modules, in server order."""

    model_config = ConfigDict(frozen=True)

    entrypoint: Module
    modules: list[Module] = Field(default_factory=list)
