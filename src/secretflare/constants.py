from typing import Literal

__all__ = [
    "API_BASE_URL",
    "DEFAULT_FETCH_CONCURRENCY",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_SERVICE_WORKER_FILENAME",
    "ENTRYPOINT_HEADER",
    "KEEP_SECRET_BINDINGS",
    "KEEP_VAR_BINDINGS",
    "METRICS_HEADER",
    "MODULE_MIME_TYPES",
    "STATIC_CONTENT_MANIFEST",
    "NOT_FOUND_ERROR_CODES",
    "PlacementMode",
]

# Cloudflare
API_BASE_URL = "https://api.cloudflare.com/client/v4"

# Defaults
DEFAULT_FETCH_CONCURRENCY = 5
DEFAULT_REQUEST_TIMEOUT = 30.0

# Version content
ENTRYPOINT_HEADER = "cf-entrypoint"
STATIC_CONTENT_MANIFEST = "__STATIC_CONTENT_MANIFEST"
DEFAULT_SERVICE_WORKER_FILENAME = "index.js"

# Upload metadata
KEEP_VAR_BINDINGS: tuple[str, ...] = ("plain_text", "json")
KEEP_SECRET_BINDINGS: tuple[str, ...] = ("secret_text", "secret_key")
METRICS_HEADER = "metricsEnabled"

PlacementMode = Literal["smart"]

# API error codes meaning the script or version does not exist
NOT_FOUND_ERROR_CODES: frozenset[int] = frozenset({10007})

MODULE_MIME_TYPES: dict[str, str] = {
    "esm": "application/javascript+module",
    "commonjs": "application/javascript",
    "compiled-wasm": "application/wasm",
    "buffer": "application/octet-stream",
    "text": "text/plain",
    "python": "text/x-python",
    "python-requirement": "text/x-python-requirement",
    "source-map": "application/source-map",
}
