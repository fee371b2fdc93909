from __future__ import annotations

from pathlib import Path

import typer

from shipline.cli.commands._helpers import exit_for_report, load_config_or_exit, resolve_source
from shipline.cli.context import build_context
from shipline.pipeline.orchestrator import ReleaseOrchestrator
from shipline.pipeline.plan import deploy_plan


def deploy(
    source: Path = typer.Argument(Path("."), help="Source checkout."),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to shipline.toml."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them."),
) -> None:
    """Install or upgrade the Helm release only."""
    ctx = build_context(dry_run=dry_run)
    source_dir = resolve_source(source)
    cfg = load_config_or_exit(ctx, source_dir, config)

    orchestrator = ReleaseOrchestrator(console=ctx.console, commands=ctx.commands)
    report = orchestrator.execute(source_dir=source_dir, config=cfg, plan=deploy_plan)
    exit_for_report(ctx, report)
