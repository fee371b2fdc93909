"""Sequential, fail-fast stage execution."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from shipline.core.policy import StagePolicy
from shipline.core.release import ReleaseContext
from shipline.core.result import Err
from shipline.output.console import ConsoleProtocol, Style
from shipline.platform.process import CommandRunner

from .model import RunReport, Stage, StageOutcome, StageRuntime, StageStatus

__all__ = ["StageRunner", "collect_reports"]


def collect_reports(source_dir: Path, patterns: Sequence[str]) -> tuple[Path, ...]:
    """Return existing report files matching the patterns, without duplicates.

    Relative patterns are globbed under the source directory; an absolute
    path is taken as a single file.
    """
    found: list[Path] = []
    for pattern in patterns:
        candidate = Path(pattern)
        matches = [candidate] if candidate.is_absolute() else sorted(source_dir.glob(pattern))
        for path in matches:
            if path.is_file() and path not in found:
                found.append(path)
    return tuple(found)


class StageRunner:
    """Runs a stage plan in order and stops at the first blocking failure.

    Observational stages may fail without stopping the run; their outcome
    is recorded as ``tolerated``. Once a blocking stage fails, every later
    stage is recorded as ``skipped`` and its action is never called.
    There are no retries.
    """

    def __init__(self, *, console: ConsoleProtocol, commands: CommandRunner) -> None:
        self._console = console
        self._commands = commands

    def run(self, stages: Sequence[Stage], context: ReleaseContext) -> RunReport:
        runtime = StageRuntime(context=context, console=self._console, commands=self._commands)
        outcomes: list[StageOutcome] = []
        aborted = False
        total = len(stages)

        for index, stage in enumerate(stages, start=1):
            if aborted:
                outcomes.append(StageOutcome(stage=stage.name, policy=stage.policy, status="skipped"))
                continue

            self._console.header(f"[{index}/{total}] {stage.title}")
            result = stage.action(runtime)
            artifacts = collect_reports(context.source_dir, stage.reports)
            for artifact in artifacts:
                self._console.print(f"report: {artifact}", Style.DIM)

            if not isinstance(result, Err):
                self._console.success(stage.title)
                outcomes.append(
                    StageOutcome(
                        stage=stage.name,
                        policy=stage.policy,
                        status="passed",
                        artifacts=artifacts,
                    )
                )
                continue

            error = result.error
            status: StageStatus
            if stage.policy is StagePolicy.OBSERVATIONAL:
                self._console.warning(f"{stage.title}: {error.message} (observational, continuing)")
                status = "tolerated"
            else:
                self._console.error(f"{stage.title}: {error.message}")
                if error.hint:
                    self._console.print(f"hint: {error.hint}", Style.DIM)
                status = "failed"
                aborted = True

            outcomes.append(
                StageOutcome(
                    stage=stage.name,
                    policy=stage.policy,
                    status=status,
                    error=error,
                    artifacts=artifacts,
                )
            )

        return RunReport(outcomes=tuple(outcomes))
