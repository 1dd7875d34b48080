"""Pydantic models for Worker versions and script settings returned by the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .binding import Binding

__all__ = [
    "Annotations",
    "Limits",
    "ScriptDescriptor",
    "ScriptRuntime",
    "ScriptSettings",
    "TailConsumer",
    "VersionDetails",
    "VersionResources",
    "WorkerMetadata",
    "WorkerVersion",
]


class WorkerMetadata(BaseModel):
    """Authorship and provenance of a version."""

    model_config = ConfigDict(frozen=True, extra="allow")

    author_email: str | None = None
    author_id: str | None = None
    created_on: str | None = None
    modified_on: str | None = None
    source: str | None = None


class Annotations(BaseModel):
    """Human annotations attached to a version."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str | None = Field(default=None, alias="workers/message")
    tag: str | None = Field(default=None, alias="workers/tag")
    triggered_by: str | None = Field(default=None, alias="workers/triggered_by")


class WorkerVersion(BaseModel):
    """
    A point-in-time snapshot of a script.

    Immutable once fetched.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    """Version UUID."""

    number: int
    """Sequential version number within the script."""

    metadata: WorkerMetadata = Field(default_factory=WorkerMetadata)


class Limits(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    cpu_ms: int | None = None


class TailConsumer(BaseModel):
    """A Worker receiving this script's tail events."""

    model_config = ConfigDict(frozen=True, extra="allow")

    service: str
    environment: str | None = None
    namespace: str | None = None


class ScriptDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    etag: str | None = None
    handlers: list[str] = Field(default_factory=list)
    placement_mode: str | None = None
    last_deployed_from: str | None = None


class ScriptRuntime(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    compatibility_date: str | None = None
    compatibility_flags: list[str] | None = None
    usage_model: str | None = None
    limits: Limits | None = None


class VersionResources(BaseModel):
    """Bindings, script descriptor and runtime settings of a version."""

    model_config = ConfigDict(frozen=True)

    bindings: list[Binding] = Field(default_factory=list)
    script: ScriptDescriptor = Field(default_factory=ScriptDescriptor)
    script_runtime: ScriptRuntime = Field(default_factory=ScriptRuntime)

    @field_validator("bindings")
    @classmethod
    def _unique_binding_names(cls, bindings: list[Binding]) -> list[Binding]:
        seen: set[str] = set()
        for binding in bindings:
            if binding.name in seen:
                raise ValueError(f"duplicate binding name '{binding.name}'")
            seen.add(binding.name)
        return bindings


class VersionDetails(WorkerVersion):
    """A WorkerVersion together with its full resource set."""

    annotations: Annotations | None = None
    resources: VersionResources = Field(default_factory=VersionResources)


class ScriptSettings(BaseModel):
    """Script-wide settings shared by every version of a script."""

    model_config = ConfigDict(frozen=True, extra="allow")

    logpush: bool = False
    tail_consumers: list[TailConsumer] | None = None

    @field_validator("logpush", mode="before")
    @classmethod
    def _null_logpush(cls, value: Any) -> Any:
        return False if value is None else value
