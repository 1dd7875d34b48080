"""Pydantic models for the new-version definition and the publish response."""

from pydantic import BaseModel, ConfigDict, Field

from secretflare.constants import PlacementMode

from .binding import Binding
from .module import ModuleSet
from .version import Annotations, Limits, TailConsumer

__all__ = ["NewVersionRequest", "Placement", "PublishResult"]


class Placement(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: PlacementMode


class NewVersionRequest(BaseModel):
    """
    Everything needed to publish a new version of a script.

    Built fresh for every publish call and discarded once the response arrives.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    """Script name."""

    modules: ModuleSet
    """Entrypoint and auxiliary modules."""

    bindings: list[Binding] = Field(default_factory=list)
    """Full binding list to upload, in order."""

    compatibility_date: str | None = None
    compatibility_flags: list[str] | None = None
    usage_model: str | None = None
    limits: Limits | None = None

    placement: Placement | None = None
    """Only set for Smart Placement."""

    logpush: bool | None = None
    tail_consumers: list[TailConsumer] | None = None

    keep_vars: bool = False
    """Inherit plain_text/json bindings from the previous version."""

    keep_secrets: bool = True
    """Inherit secret bindings not present in `bindings` from the previous version."""

    annotations: Annotations = Field(default_factory=Annotations)


class PublishResult(BaseModel):
    """Identifiers returned after a new version is created."""

    model_config = ConfigDict(frozen=True, extra="allow")

    available_on_subdomain: bool = False
    id: str | None = None
    etag: str | None = None
    deployment_id: str | None = None

    @property
    def new_version_id(self) -> str | None:
        return self.id
