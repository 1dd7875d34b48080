import asyncio
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, NoReturn, TypeVar

import typer
from pydantic import ValidationError
from rich.markup import escape

from secretflare.cli.console import err_console
from secretflare.cli.exceptions import CliError, ConfigError
from secretflare.client.transport import AsyncSecretflareTransport
from secretflare.exceptions import PublishRejectedError, SecretflareError
from secretflare.models.config import Config

__all__ = ["AppContext", "fail", "get_app_context", "resolve_script_name", "run_command"]

T = TypeVar("T")


@dataclass
class AppContext:
    """Configuration and API transport shared by a single command run."""

    config: Config
    transport: AsyncSecretflareTransport


def _load_config() -> Config:
    try:
        return Config()  # ty:ignore[missing-argument]
    except ValidationError as e:
        missing = ", ".join(
            f"SECRETFLARE_{str(err['loc'][0]).upper()}" for err in e.errors() if err["loc"]
        )
        raise ConfigError(f"Invalid or missing configuration: {missing}") from e


def _build_transport(config: Config) -> AsyncSecretflareTransport:
    return AsyncSecretflareTransport.from_config(config)


@asynccontextmanager
async def get_app_context() -> AsyncIterator[AppContext]:
    config = _load_config()
    transport = _build_transport(config)
    try:
        yield AppContext(config=config, transport=transport)
    finally:
        await transport.aclose()


def resolve_script_name(name: str | None, config: Config) -> str:
    script_name = name or config.script_name
    if not script_name:
        raise ConfigError(
            "Required Worker name missing. Please set SECRETFLARE_SCRIPT_NAME, "
            "or pass it as an argument with `--name <worker-name>`"
        )
    return script_name


def fail(error: Exception) -> NoReturn:
    """Print `error` to stderr and exit with code 1."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", highlight=False)
    if isinstance(error, PublishRejectedError):
        for detail in error.errors:
            err_console.print(f"  {detail.get('code')}: {detail.get('message')}", markup=False)
    raise typer.Exit(code=1) from error


def run_command(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning known failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except (CliError, SecretflareError) as e:
        fail(e)
