from __future__ import annotations

import typer

from relpub import __version__
from relpub.cli.commands.check_cmd import check
from relpub.cli.commands.publish_cmd import publish
from relpub.cli.commands.rewrite_cmd import rewrite


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(publish)
app.command()(rewrite)
app.command()(check)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Publish a release: rewrite the manifest version and run the registry publish."""


def main() -> None:
    app()
