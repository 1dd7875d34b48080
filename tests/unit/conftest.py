from typing import Any

import httpx
import pytest
import pytest_asyncio

from secretflare.client.transport import AsyncSecretflareTransport
from secretflare.versions.content import parse_form_data

ACCOUNT_ID = "acc123"
SCRIPT_NAME = "my-worker"
VERSION_ID = "0b2c3d4e-0000-4000-8000-000000000001"
NEW_VERSION_ID = "0b2c3d4e-0000-4000-8000-000000000002"
BASE_URL = "https://api.test/client/v4"
SCRIPT_PATH = f"/client/v4/accounts/{ACCOUNT_ID}/workers/scripts/{SCRIPT_NAME}"

DEFAULT_BINDINGS: list[dict[str, Any]] = [
    {"type": "plain_text", "name": "ENV", "text": "prod"},
    {"type": "secret_text", "name": "API_KEY"},
    {"type": "kv_namespace", "name": "CACHE", "namespace_id": "kv123"},
    {"type": "service", "name": "AUTH", "service": "auth-worker", "environment": "production"},
]

DEFAULT_RUNTIME: dict[str, Any] = {
    "compatibility_date": "2024-04-01",
    "compatibility_flags": ["nodejs_compat"],
    "usage_model": "standard",
    "limits": {"cpu_ms": 50},
}


def envelope(result: Any, success: bool = True, errors: list | None = None) -> dict:
    return {"success": success, "errors": errors or [], "messages": [], "result": result}


def version_payload(
    version_id: str = VERSION_ID,
    number: int = 3,
    bindings: list[dict[str, Any]] | None = None,
    placement_mode: str | None = None,
    runtime: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "id": version_id,
        "number": number,
        "metadata": {
            "author_email": "dev@example.com",
            "author_id": "user-1",
            "created_on": "2024-05-01T10:00:00.000000Z",
            "modified_on": "2024-05-01T10:00:00.000000Z",
            "source": "wrangler",
        },
        "annotations": {"workers/triggered_by": "upload"},
        "resources": {
            "bindings": DEFAULT_BINDINGS if bindings is None else bindings,
            "script": {
                "etag": "etag-abc",
                "handlers": ["fetch"],
                "placement_mode": placement_mode,
                "last_deployed_from": "wrangler",
            },
            "script_runtime": DEFAULT_RUNTIME if runtime is None else runtime,
        },
    }


def encode_form(parts: list[tuple[str, bytes, str]]) -> tuple[bytes, str]:
    """Encode (name, content, content type) triples as multipart/form-data."""
    request = httpx.Request(
        "POST",
        "https://form.invalid",
        files=[(name, (name, content, content_type)) for name, content, content_type in parts],
    )
    return request.read(), request.headers["content-type"]


def modular_content(
    parts: list[tuple[str, bytes, str]], entrypoint: str | None
) -> tuple[bytes, dict[str, str]]:
    body, content_type = encode_form(parts)
    headers = {"content-type": content_type}
    if entrypoint is not None:
        headers["cf-entrypoint"] = entrypoint
    return body, headers


def not_found() -> httpx.Response:
    return httpx.Response(
        404,
        json=envelope(
            None,
            success=False,
            errors=[{"code": 10007, "message": "workers.api.error.script_not_found"}],
        ),
    )


class FakeWorkersApi:
    """In-memory stand-in for the Workers scripts API of one script."""

    def __init__(self) -> None:
        self.versions: dict[str, dict[str, Any]] = {VERSION_ID: version_payload()}
        self.version_list: list[dict[str, Any]] = [
            {"id": VERSION_ID, "number": 3, "metadata": {"source": "wrangler"}}
        ]
        self.deployments: list[dict[str, Any]] = []
        self.settings: dict[str, Any] = {"logpush": False, "tail_consumers": None}
        self.content: dict[str, tuple[bytes, dict[str, str]]] = {
            VERSION_ID: modular_content(
                [
                    ("index.js", b"export default { fetch() {} }", "application/javascript+module"),
                    ("utils.js", b"export const x = 1;", "application/javascript+module"),
                ],
                entrypoint="index.js",
            )
        }
        self.publish_status = 200
        self.publish_result: dict[str, Any] = envelope(
            {
                "available_on_subdomain": True,
                "id": NEW_VERSION_ID,
                "etag": "etag-new",
                "deployment_id": None,
            }
        )
        self.requests: list[httpx.Request] = []

    @property
    def published(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(SCRIPT_PATH):
            return not_found()
        rest = path[len(SCRIPT_PATH) :]

        if request.method == "POST" and rest == "/versions":
            return httpx.Response(self.publish_status, json=self.publish_result)
        if rest == "/versions":
            return httpx.Response(200, json=envelope({"items": self.version_list}))
        if rest.startswith("/versions/"):
            version = self.versions.get(rest.rsplit("/", 1)[-1])
            return httpx.Response(200, json=envelope(version)) if version else not_found()
        if rest == "/script-settings":
            return httpx.Response(200, json=envelope(self.settings))
        if rest == "/deployments":
            return httpx.Response(200, json=envelope({"deployments": self.deployments}))
        if rest == "/content/v2":
            content = self.content.get(request.url.params.get("version", ""))
            if content is None:
                return not_found()
            body, headers = content
            return httpx.Response(200, content=body, headers=headers)
        return not_found()


def published_form(request: httpx.Request) -> dict[str, Any]:
    """Decode an uploaded version form into {part name: FormPart}."""
    parts = parse_form_data(request.content, request.headers["content-type"])
    return {part.name: part for part in parts}


@pytest.fixture
def api() -> FakeWorkersApi:
    return FakeWorkersApi()


@pytest_asyncio.fixture
async def transport(api: FakeWorkersApi):
    async with AsyncSecretflareTransport(
        api_token="test-token",
        base_url=BASE_URL,
        transport=httpx.MockTransport(api.handler),
    ) as t:
        yield t
