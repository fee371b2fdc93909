"""Release orchestration: preflight, stage plan, cleanup.

Usage:
    orchestrator = ReleaseOrchestrator(console=console, commands=SubprocessRunner(console))
    report = orchestrator.execute(source_dir=Path("."))
    if not report.ok:
        ...
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from shipline.core.config import CONFIG_FILENAME, Config, resolve_config
from shipline.core.release import Credentials, ReleaseContext
from shipline.core.result import Err, Ok, Result
from shipline.output.console import ConsoleProtocol, Style
from shipline.platform.process import CommandRunner
from shipline.services.checkout import checkout
from shipline.services.cleanup import cleanup
from shipline.services.metadata import extract_metadata

from .errors import StageError
from .model import RunReport
from .plan import PlanBuilder, release_plan
from .runner import StageRunner

__all__ = ["ReleaseOrchestrator"]

_PUBLISH_STAGES = frozenset({"containerize", "image-scan", "push"})


class ReleaseOrchestrator:
    """Runs one release against one checkout.

    When no config is passed in, ``shipline.toml`` is read from the
    checkout after it exists, so a freshly cloned repository brings its
    own settings.
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        commands: CommandRunner,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._console = console
        self._commands = commands
        self._env = env

    def prepare(
        self,
        *,
        source_dir: Path,
        config: Config | None = None,
        repo_url: str | None = None,
        branch: str | None = None,
        manifest: Path | None = None,
        strict_scans: bool = False,
    ) -> Result[ReleaseContext, StageError]:
        """Checkout, config resolution and metadata extraction.

        The returned context is the only state later stages see.
        """
        url = repo_url or (config.source.url if config else None)
        branch = branch or (config.source.branch if config else "main")

        self._console.header("Checkout")
        checked_out = checkout(
            source_dir=source_dir,
            url=url,
            branch=branch,
            commands=self._commands,
        )
        if isinstance(checked_out, Err):
            return checked_out
        root = checked_out.value

        if config is None:
            resolved = resolve_config(root)
            if isinstance(resolved, Err):
                return Err(
                    StageError(
                        kind="config_invalid",
                        message=resolved.error.message,
                        hint=resolved.error.hint,
                    )
                )
            config = resolved.value
        if strict_scans:
            config = replace(config, scans=config.scans.all_blocking())

        meta = extract_metadata(root, manifest)
        if isinstance(meta, Err):
            return meta
        metadata = meta.value
        self._console.print(f"app: {metadata.name}", Style.DIM)
        self._console.print(f"version: {metadata.version}", Style.DIM)
        self._console.print(f"manifest: {metadata.manifest}", Style.DIM)

        return Ok(
            ReleaseContext(
                source_dir=root,
                metadata=metadata,
                config=config,
                credentials=Credentials.from_env(config, self._env),
            )
        )

    def execute(
        self,
        *,
        source_dir: Path,
        config: Config | None = None,
        plan: PlanBuilder = release_plan,
        repo_url: str | None = None,
        branch: str | None = None,
        manifest: Path | None = None,
        strict_scans: bool = False,
    ) -> RunReport:
        """Run preflight and the stage plan, then clean up unconditionally."""
        prepared = self.prepare(
            source_dir=source_dir,
            config=config,
            repo_url=repo_url,
            branch=branch,
            manifest=manifest,
            strict_scans=strict_scans,
        )
        if isinstance(prepared, Err):
            return self._abort_preflight(prepared.error, None)

        context = prepared.value
        stages = plan(context)
        names = {s.name for s in stages}
        missing = context.config.missing_settings(
            publish=bool(names & _PUBLISH_STAGES),
            deploy="deploy" in names,
        )
        if missing:
            error = StageError(
                kind="config_invalid",
                message=f"missing settings: {', '.join(missing)}",
                hint=f"Set them in {CONFIG_FILENAME}",
            )
            return self._abort_preflight(error, context)

        runner = StageRunner(console=self._console, commands=self._commands)
        report: RunReport | None = None
        try:
            report = runner.run(stages, context)
        finally:
            warnings = cleanup(context, report, console=self._console, commands=self._commands)

        return RunReport(outcomes=report.outcomes, cleanup_warnings=warnings)

    def _abort_preflight(self, error: StageError, context: ReleaseContext | None) -> RunReport:
        self._console.error(error.message)
        if error.hint:
            self._console.print(f"hint: {error.hint}", Style.DIM)
        report = RunReport(preflight_error=error)
        warnings = cleanup(context, report, console=self._console, commands=self._commands)
        return RunReport(preflight_error=error, cleanup_warnings=warnings)
