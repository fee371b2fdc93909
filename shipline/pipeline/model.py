"""Stage plan types.

A release is an ordered tuple of ``Stage`` values. Each stage carries its
own ``StagePolicy`` so whether a failure stops the run is data, not a
side effect of how the underlying command is written.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from shipline.core.policy import StagePolicy
from shipline.core.release import ReleaseContext
from shipline.core.result import Err, Ok, Result
from shipline.output.console import ConsoleProtocol
from shipline.platform.process import CommandRunner

from .errors import StageError, StageErrorKind

__all__ = [
    "RunReport",
    "Stage",
    "StageAction",
    "StageOutcome",
    "StageRuntime",
    "StageStatus",
]

StageStatus = Literal["passed", "failed", "tolerated", "skipped"]


@dataclass(frozen=True, slots=True)
class StageRuntime:
    """What a stage action receives: the release plus the means to act on it."""

    context: ReleaseContext
    console: ConsoleProtocol
    commands: CommandRunner

    @property
    def dry_run(self) -> bool:
        return self.commands.dry_run

    def invoke(
        self,
        cmd: Sequence[str],
        *,
        kind: StageErrorKind,
        message: str,
        extra_env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> Result[None, StageError]:
        """Run one tool in the source directory, mapping failure to a StageError.

        A missing executable is reported as ``tool_missing`` whatever
        ``kind`` the caller asked for.
        """
        result = self.commands.run(
            cmd,
            cwd=self.context.source_dir,
            extra_env=extra_env,
            timeout=timeout,
            input_text=input_text,
        )
        if isinstance(result, Ok):
            return Ok(None)

        e = result.error
        if e.not_found:
            return Err(
                StageError(
                    kind="tool_missing",
                    message=f"{cmd[0]}: command not found",
                    hint="Install it or point shipline.toml at the right executable",
                )
            )
        if e.timed_out:
            return Err(StageError(kind=kind, message=f"{message}: {e.stderr}"))
        return Err(
            StageError(
                kind=kind,
                message=f"{message} (exit {e.returncode})",
                hint=e.stderr.strip() or None,
                returncode=e.returncode,
            )
        )


StageAction = Callable[[StageRuntime], Result[None, StageError]]


@dataclass(frozen=True, slots=True)
class Stage:
    """One named step of the release.

    Attributes:
        name: Stable identifier (``compile``, ``image-scan``, ...)
        title: Human-readable banner
        policy: Whether a failure aborts the run
        action: The work itself
        reports: Glob patterns (relative to the source dir) of report files
            the stage leaves behind; collected whether it passed or not
    """

    name: str
    title: str
    policy: StagePolicy
    action: StageAction
    reports: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class StageOutcome:
    stage: str
    policy: StagePolicy
    status: StageStatus
    error: StageError | None = None
    artifacts: tuple[Path, ...] = ()


@dataclass(frozen=True, slots=True)
class RunReport:
    """Result of a whole run, preflight included.

    Attributes:
        outcomes: One entry per planned stage, in plan order
        preflight_error: Set when checkout or metadata extraction failed
        cleanup_warnings: Problems met while cleaning up (never fatal)
    """

    outcomes: tuple[StageOutcome, ...] = ()
    preflight_error: StageError | None = None
    cleanup_warnings: tuple[str, ...] = field(default=())

    @property
    def failure(self) -> StageOutcome | None:
        """The blocking stage that aborted the run, if any."""
        for outcome in self.outcomes:
            if outcome.status == "failed":
                return outcome
        return None

    @property
    def error(self) -> StageError | None:
        """The hard failure that decides the exit code."""
        if self.preflight_error is not None:
            return self.preflight_error
        failure = self.failure
        return failure.error if failure is not None else None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def artifacts(self) -> tuple[Path, ...]:
        return tuple(a for o in self.outcomes for a in o.artifacts)

    def outcome(self, stage: str) -> StageOutcome | None:
        for o in self.outcomes:
            if o.stage == stage:
                return o
        return None

    def executed(self, stage: str) -> bool:
        """True if the stage's action ran (whatever its result)."""
        o = self.outcome(stage)
        return o is not None and o.status != "skipped"
