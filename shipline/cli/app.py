from __future__ import annotations

import typer

from shipline import __version__
from shipline.cli.commands.deploy_cmd import deploy
from shipline.cli.commands.metadata_cmd import metadata
from shipline.cli.commands.plan_cmd import plan
from shipline.cli.commands.run_cmd import run

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(run)
app.command()(deploy)
app.command()(metadata)
app.command()(plan)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Release orchestrator: build, scan, publish and deploy an application."""


def main() -> None:
    app()
