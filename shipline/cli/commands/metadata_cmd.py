from __future__ import annotations

import json
from pathlib import Path

import typer

from shipline.cli.commands._helpers import resolve_source
from shipline.cli.context import build_context
from shipline.core.result import Err
from shipline.output.errors import print_stage_error, stage_error_exit_code
from shipline.services.metadata import extract_metadata


def metadata(
    source: Path = typer.Argument(Path("."), help="Source checkout."),
    manifest: Path | None = typer.Option(
        None, "--manifest", help="Explicit pom.xml or package.json."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print as JSON."),
) -> None:
    """Show the application name and version a release would use."""
    ctx = build_context()
    result = extract_metadata(resolve_source(source), manifest)
    if isinstance(result, Err):
        print_stage_error(result.error, ctx.console)
        raise typer.Exit(code=stage_error_exit_code(result.error))

    meta = result.value
    if as_json:
        typer.echo(
            json.dumps({"name": meta.name, "version": meta.version, "manifest": meta.manifest})
        )
        return
    ctx.console.print(f"name: {meta.name}")
    ctx.console.print(f"version: {meta.version}")
    ctx.console.print(f"manifest: {meta.manifest}")
