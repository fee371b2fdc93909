from __future__ import annotations

from pathlib import Path

import typer

from shipline.cli.commands._helpers import exit_for_report, load_config_or_exit, resolve_source
from shipline.cli.context import build_context
from shipline.core.config import Config
from shipline.pipeline.orchestrator import ReleaseOrchestrator
from shipline.pipeline.plan import release_plan


def run(
    source: Path = typer.Argument(
        Path("."), help="Source checkout (or clone target with --repo)."
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to shipline.toml."),
    repo: str | None = typer.Option(None, "--repo", help="Clone this repository first."),
    branch: str | None = typer.Option(None, "--branch", help="Branch to clone (default: main)."),
    manifest: Path | None = typer.Option(
        None, "--manifest", help="Explicit pom.xml or package.json."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them."),
    strict_scans: bool = typer.Option(
        False, "--strict-scans", help="Make every scan failure stop the release."
    ),
) -> None:
    """Build, test, scan, publish and deploy."""
    ctx = build_context(dry_run=dry_run)
    source_dir = resolve_source(source)

    cfg: Config | None = None
    if config is not None:
        cfg = load_config_or_exit(ctx, source_dir, config)

    orchestrator = ReleaseOrchestrator(console=ctx.console, commands=ctx.commands)
    report = orchestrator.execute(
        source_dir=source_dir,
        config=cfg,
        plan=release_plan,
        repo_url=repo,
        branch=branch,
        manifest=manifest,
        strict_scans=strict_scans,
    )
    exit_for_report(ctx, report)
