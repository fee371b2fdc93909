from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from shipline.cli.commands._helpers import load_config_or_exit, resolve_source
from shipline.cli.context import build_context
from shipline.core.release import Credentials, ReleaseContext
from shipline.core.result import Err
from shipline.output.console import Style
from shipline.output.errors import print_stage_error, stage_error_exit_code
from shipline.pipeline.plan import release_plan
from shipline.services.metadata import extract_metadata


def plan(
    source: Path = typer.Argument(Path("."), help="Source checkout."),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to shipline.toml."),
    strict_scans: bool = typer.Option(
        False, "--strict-scans", help="Show the plan with every scan blocking."
    ),
) -> None:
    """List the release stages and their failure policies."""
    ctx = build_context()
    source_dir = resolve_source(source)
    cfg = load_config_or_exit(ctx, source_dir, config)
    if strict_scans:
        cfg = replace(cfg, scans=cfg.scans.all_blocking())

    meta = extract_metadata(source_dir)
    if isinstance(meta, Err):
        print_stage_error(meta.error, ctx.console)
        raise typer.Exit(code=stage_error_exit_code(meta.error))

    context = ReleaseContext(
        source_dir=source_dir,
        metadata=meta.value,
        config=cfg,
        credentials=Credentials(),
    )
    ctx.console.header(f"{context.metadata.name} {context.metadata.version}")
    for index, stage in enumerate(release_plan(context), start=1):
        ctx.console.print(f"{index}. {stage.name}: {stage.title} [{stage.policy}]")
    ctx.console.print(f"image: {context.published_image}", Style.DIM)
    ctx.console.print(
        f"release: {context.metadata.name} -> namespace {cfg.deploy.namespace}", Style.DIM
    )
