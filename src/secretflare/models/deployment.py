from pydantic import BaseModel, ConfigDict, Field

from .version import Annotations

__all__ = ["Deployment", "DeploymentVersion"]


class DeploymentVersion(BaseModel):
    """A version receiving a share of a deployment's traffic."""

    model_config = ConfigDict(frozen=True)

    version_id: str
    percentage: float


class Deployment(BaseModel):
    """Assignment of traffic percentages to one or more versions."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    source: str | None = None
    strategy: str | None = None
    author_email: str | None = None
    created_on: str | None = None
    annotations: Annotations | None = None
    versions: list[DeploymentVersion] = Field(default_factory=list)
