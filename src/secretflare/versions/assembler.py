import logging
from collections.abc import Sequence

from secretflare.models.binding import Binding
from secretflare.models.module import ModuleSet
from secretflare.models.upload import NewVersionRequest, Placement
from secretflare.models.version import Annotations, ScriptSettings, VersionDetails

__all__ = ["assemble_version"]

logger = logging.getLogger(__name__)


def assemble_version(
    script_name: str,
    details: VersionDetails,
    settings: ScriptSettings,
    modules: ModuleSet,
    bindings: Sequence[Binding],
    message: str | None = None,
    tag: str | None = None,
) -> NewVersionRequest:
    """
    Build the definition of a new version from an existing one.

    Runtime settings are copied verbatim from `details`. Plain variables are
    uploaded in full (`keep_vars=False`) while secrets missing from `bindings`
    are inherited from the previous version (`keep_secrets=True`).

    Args:
        script_name: Name of the Worker.
        details: The version being copied.
        settings: Script-wide settings (logpush, tail consumers).
        modules: Decoded modules of the version.
        bindings: Merged binding list.
        message: Optional `workers/message` annotation.
        tag: Optional `workers/tag` annotation.

    Returns:
        A NewVersionRequest ready to be encoded and published.
    """
    runtime = details.resources.script_runtime
    placement = (
        Placement(mode="smart") if details.resources.script.placement_mode == "smart" else None
    )

    request = NewVersionRequest(
        name=script_name,
        modules=modules,
        bindings=list(bindings),
        compatibility_date=runtime.compatibility_date,
        compatibility_flags=runtime.compatibility_flags,
        usage_model=runtime.usage_model,
        limits=runtime.limits,
        placement=placement,
        logpush=settings.logpush,
        tail_consumers=settings.tail_consumers,
        keep_vars=False,
        keep_secrets=True,
        annotations=Annotations(message=message, tag=tag),
    )
    logger.debug(
        "Assembled version of %s from %s: %d bindings, %d modules",
        script_name,
        details.id,
        len(request.bindings),
        1 + len(modules.modules),
    )
    return request
