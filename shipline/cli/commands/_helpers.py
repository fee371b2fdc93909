"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from shipline.core.config import Config, resolve_config
from shipline.core.errors import ErrorCode
from shipline.core.result import Err
from shipline.output.console import Style
from shipline.output.errors import print_config_error, stage_error_exit_code

if TYPE_CHECKING:
    from shipline.cli.context import CLIContext
    from shipline.pipeline.model import RunReport


def resolve_source(source: Path) -> Path:
    try:
        return source.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid source directory: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def load_config_or_exit(ctx: CLIContext, source_dir: Path, explicit: Path | None) -> Config:
    result = resolve_config(source_dir, explicit)
    if isinstance(result, Err):
        print_config_error(result.error, ctx.console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def print_summary(ctx: CLIContext, report: RunReport) -> None:
    console = ctx.console
    if not report.outcomes:
        return
    console.header("Summary")
    for outcome in report.outcomes:
        line = f"{outcome.stage}: {outcome.status} ({outcome.policy})"
        match outcome.status:
            case "passed":
                console.print(line, Style.SUCCESS)
            case "tolerated":
                console.print(line, Style.WARNING)
            case "failed":
                console.print(line, Style.ERROR)
            case "skipped":
                console.print(line, Style.DIM)
    for artifact in report.artifacts:
        console.print(f"report: {artifact}", Style.DIM)


def exit_for_report(ctx: CLIContext, report: RunReport) -> None:
    """Print the summary and exit non-zero on a hard failure."""
    print_summary(ctx, report)
    error = report.error
    if error is not None:
        raise typer.Exit(code=stage_error_exit_code(error))
    ctx.console.success("release complete")


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
