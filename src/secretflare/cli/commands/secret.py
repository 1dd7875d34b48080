import json
import sys
from pathlib import Path
from typing import Annotated

import typer

from secretflare.cli.console import console
from secretflare.cli.context import fail, get_app_context, resolve_script_name, run_command
from secretflare.cli.exceptions import InputError
from secretflare.client.cache import VersionCache
from secretflare.client.reader import VersionReader
from secretflare.models.upload import PublishResult
from secretflare.versions.bindings import secret_names
from secretflare.versions.deployments import fetch_latest_deployment_versions
from secretflare.versions.secrets import put_secret, put_secrets_bulk

NameOption = Annotated[
    str | None,
    typer.Option("--name", help="Name of the Worker. Defaults to config."),
]
MessageOption = Annotated[
    str | None,
    typer.Option("--message", help="Description of the new version"),
]
TagOption = Annotated[
    str | None,
    typer.Option("--tag", help="A tag for the new version"),
]
SendMetricsOption = Annotated[
    bool | None,
    typer.Option(
        "--send-metrics/--no-send-metrics",
        help="Report usage metrics with the upload. Defaults to config.",
    ),
]


def _read_secret_value(key: str) -> str:
    """Read a secret from piped stdin, or prompt for it without echo."""
    if not sys.stdin.isatty():
        value = sys.stdin.read()
        return value.rstrip("\r\n")
    return typer.prompt(f"Enter a secret value for {key}", hide_input=True)


def _load_bulk_secrets(file: Path | None) -> dict[str, str]:
    """
    Parse a JSON object of secret names to values.

    Reads stdin when no file (or '-') is given.
    """
    try:
        if file is None or str(file) == "-":
            raw = sys.stdin.read()
        else:
            raw = file.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Could not read secrets file {file}: {e}") from e

    try:
        content = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputError(f"Secrets input is not valid JSON: {e}") from e

    if not isinstance(content, dict) or not all(
        isinstance(name, str) and isinstance(value, str) for name, value in content.items()
    ):
        raise InputError("Secrets input must be a JSON object of string names to string values")
    return content


def _print_result(result: PublishResult, what: str) -> None:
    console.print(
        f"✨ Success! Created version {result.id} with {what}.\n"
        f"➡️  To deploy this version to production traffic, deploy version {result.id}.",
        markup=False,
        highlight=False,
    )


async def _put_async(
    key: str,
    value: str,
    name: str | None,
    message: str | None,
    tag: str | None,
    send_metrics: bool | None,
) -> PublishResult:
    async with get_app_context() as ctx:
        script_name = resolve_script_name(name, ctx.config)
        console.print(f"🌀 Creating the secret for the Worker \"{script_name}\"", markup=False)
        return await put_secret(
            ctx.transport,
            ctx.config.account_id,
            script_name,
            key,
            value,
            message=message,
            tag=tag,
            send_metrics=send_metrics,
        )


async def _bulk_async(
    secrets: dict[str, str],
    name: str | None,
    message: str | None,
    tag: str | None,
    send_metrics: bool | None,
) -> PublishResult:
    async with get_app_context() as ctx:
        script_name = resolve_script_name(name, ctx.config)
        console.print(
            f"🌀 Creating the secrets for the Worker \"{script_name}\"", markup=False
        )
        return await put_secrets_bulk(
            ctx.transport,
            ctx.config.account_id,
            script_name,
            secrets,
            message=message,
            tag=tag,
            send_metrics=send_metrics,
        )


async def _list_async(name: str | None) -> None:
    async with get_app_context() as ctx:
        script_name = resolve_script_name(name, ctx.config)
        versions, rollout = await fetch_latest_deployment_versions(
            VersionReader(ctx.transport),
            ctx.config.account_id,
            script_name,
            VersionCache(),
        )

        for version in versions:
            console.print(
                f"-- Version {version.id} ({rollout[version.id]:g}%) secrets --",
                markup=False,
                highlight=False,
            )
            for secret in secret_names(version):
                console.print(f"Secret Name: {secret}", markup=False, highlight=False)
            console.print()


def put(
    key: Annotated[str, typer.Argument(help="The variable name to be accessible in the Worker")],
    name: NameOption = None,
    message: MessageOption = None,
    tag: TagOption = None,
    send_metrics: SendMetricsOption = None,
) -> None:
    """Create or update a secret variable for a Worker."""
    value = _read_secret_value(key)
    result = run_command(_put_async(key, value, name, message, tag, send_metrics))
    _print_result(result, f"secret {key}")


def bulk(
    file: Annotated[
        Path | None,
        typer.Argument(help="JSON file of secret names to values; '-' or omitted reads stdin"),
    ] = None,
    name: NameOption = None,
    message: MessageOption = None,
    tag: TagOption = None,
    send_metrics: SendMetricsOption = None,
) -> None:
    """Create or update several secret variables for a Worker."""
    try:
        secrets = _load_bulk_secrets(file)
    except InputError as e:
        fail(e)
    result = run_command(_bulk_async(secrets, name, message, tag, send_metrics))
    _print_result(result, f"{len(secrets)} secrets")


def list_secrets(name: NameOption = None) -> None:
    """List the secrets currently deployed."""
    run_command(_list_async(name))
