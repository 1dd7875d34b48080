from collections.abc import Iterable, Sequence

from secretflare.models.binding import Binding, Secret, is_secret, secret_text_binding
from secretflare.models.version import VersionDetails

__all__ = ["merge_bindings", "secret_names"]


def merge_bindings(bindings: Sequence[Binding], secrets: Iterable[Secret]) -> list[Binding]:
    """
    Replace every secret binding with the given secrets.

    Non-secret bindings keep their relative order; the new `secret_text`
    bindings follow them in the order given. Secrets that are dropped here
    and not re-supplied are inherited server-side through `keep_bindings`.
    Names are not checked against the retained bindings.
    """
    merged = [binding for binding in bindings if not is_secret(binding.kind)]
    merged.extend(secret_text_binding(secret) for secret in secrets)
    return merged


def secret_names(details: VersionDetails) -> list[str]:
    """Names of the secret bindings on a version, in binding order."""
    return [b.name for b in details.resources.bindings if is_secret(b.kind)]
