from typing import Annotated

import typer

from secretflare import __version__
from secretflare.cli.commands import secret
from secretflare.cli.console import configure_logging, console

app = typer.Typer(
    name="secretflare",
    help="Rotate Cloudflare Worker secrets by publishing new versions.",
    no_args_is_help=True,
)

secret_app = typer.Typer(help="Manage secrets on Worker versions.", no_args_is_help=True)
secret_app.command("put")(secret.put)
secret_app.command("bulk")(secret.bulk)
secret_app.command("list")(secret.list_secrets)
app.add_typer(secret_app, name="secret")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"secretflare {__version__}", highlight=False)
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logs")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = None,
) -> None:
    configure_logging(verbose)
