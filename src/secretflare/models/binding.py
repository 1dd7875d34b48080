"""Pydantic models for Worker bindings and the secrets that replace them."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, SecretStr

__all__ = [
    "SECRET_KINDS",
    "Binding",
    "BindingKind",
    "Secret",
    "is_secret",
    "secret_text_binding",
]


class BindingKind(str, Enum):
    """Known values of a binding's `type` field."""

    PLAIN_TEXT = "plain_text"
    JSON = "json"
    SECRET_TEXT = "secret_text"
    SECRET_KEY = "secret_key"
    KV_NAMESPACE = "kv_namespace"
    DURABLE_OBJECT_NAMESPACE = "durable_object_namespace"
    R2_BUCKET = "r2_bucket"
    D1 = "d1"
    SERVICE = "service"
    QUEUE = "queue"
    ANALYTICS_ENGINE = "analytics_engine"
    WASM_MODULE = "wasm_module"
    TEXT_BLOB = "text_blob"
    DATA_BLOB = "data_blob"
    BROWSER = "browser"
    AI = "ai"
    VECTORIZE = "vectorize"
    HYPERDRIVE = "hyperdrive"
    MTLS_CERTIFICATE = "mtls_certificate"
    DISPATCH_NAMESPACE = "dispatch_namespace"
    SEND_EMAIL = "send_email"
    VERSION_METADATA = "version_metadata"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "BindingKind":
        return cls.UNKNOWN


SECRET_KINDS: frozenset[BindingKind] = frozenset({BindingKind.SECRET_TEXT, BindingKind.SECRET_KEY})


def is_secret(kind: BindingKind) -> bool:
    """Return True when bindings of this kind hold secret material."""
    return kind in SECRET_KINDS


class Binding(BaseModel):
    """
    A single binding as reported by the versions API.

    Only `type` and `name` are modelled; every other key is kept as-is so
    that bindings this package knows nothing about are uploaded unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    """Raw binding type, e.g. 'plain_text' or 'service'."""

    name: str
    """Name the binding is exposed under in the Worker environment."""

    @property
    def kind(self) -> BindingKind:
        return BindingKind(self.type)


class Secret(BaseModel):
    """A secret supplied by the caller, installed as a `secret_text` binding."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: SecretStr


def secret_text_binding(secret: Secret) -> Binding:
    return Binding(
        type=BindingKind.SECRET_TEXT.value,
        name=secret.name,
        text=secret.value.get_secret_value(),
    )
