"""Subprocess execution with Result-based error handling.

Every pipeline stage is a blocking call to an external tool. This module
wraps ``subprocess.run`` so those calls return ``Ok``/``Err`` instead of
raising, and exposes a ``CommandRunner`` seam so stages can be driven by
a recording fake in tests or by a printing runner in ``--dry-run``.

Usage:
    result = run(["mvn", "-v"], cwd=Path("."))
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from shipline.core.result import Err, Ok, Result
from shipline.output.console import ConsoleProtocol, Style

__all__ = [
    "CommandRunner",
    "DryRunRunner",
    "ProcessError",
    "SubprocessRunner",
    "format_command",
    "run",
    "run_silent",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 when the process never ran or was killed.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error / timeout description.
        not_found: The executable could not be found.
        timed_out: The process exceeded its timeout and was killed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    not_found: bool = False
    timed_out: bool = False

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if self.timed_out:
            return f"{cmd_str} timed out"
        if self.not_found:
            return f"{cmd_str}: command not found"
        return f"{cmd_str} failed (exit {self.returncode})"


def format_command(cmd: Sequence[str]) -> str:
    """Render a command as a copy-pasteable shell line."""
    return shlex.join(cmd)


def _merged_env(extra_env: Mapping[str, str] | None) -> dict[str, str] | None:
    if not extra_env:
        return None
    env = os.environ.copy()
    env.update(extra_env)
    return env


def _launch_error(cmd: Sequence[str], e: OSError) -> ProcessError:
    return ProcessError(
        command=tuple(cmd),
        returncode=-1,
        stdout="",
        stderr=str(e),
        not_found=isinstance(e, FileNotFoundError),
    )


def _timeout_error(cmd: Sequence[str], timeout: float | None) -> ProcessError:
    return ProcessError(
        command=tuple(cmd),
        returncode=-1,
        stdout="",
        stderr=f"Command timed out after {timeout}s",
        timed_out=True,
    )


def run(
    cmd: Sequence[str],
    cwd: Path,
    extra_env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
    input_text: str | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        extra_env: Variables added on top of the current environment.
        timeout: Maximum seconds to wait (None for no limit).
        input_text: Text written to the process's standard input.

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=str(cwd),
            env=_merged_env(extra_env),
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(_timeout_error(cmd, timeout))
    except OSError as e:
        return Err(_launch_error(cmd, e))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: Sequence[str],
    cwd: Path,
    extra_env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
    input_text: str | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, letting its output stream to the terminal.

    Build and scan tools print long progress logs the user wants to see
    live, so nothing is captured. Returns Ok(None) on exit 0.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=str(cwd),
            env=_merged_env(extra_env),
            input=input_text,
            text=input_text is not None,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(_timeout_error(cmd, timeout))
    except OSError as e:
        return Err(_launch_error(cmd, e))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout="",
                stderr="",
            )
        )

    return Ok(None)


class CommandRunner(Protocol):
    """Executes one external tool invocation for a stage."""

    # True when commands are only printed; stages then skip checks on
    # secrets and local files that a real run needs
    dry_run: bool

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        extra_env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> Result[None, ProcessError]: ...


class SubprocessRunner:
    """Production runner: echoes the command, then streams the tool's output."""

    dry_run = False

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        extra_env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> Result[None, ProcessError]:
        self._console.print(f"$ {format_command(cmd)}", Style.DIM)
        return run_silent(
            cmd,
            cwd,
            extra_env,
            timeout=timeout,
            input_text=input_text,
        )


class DryRunRunner:
    """Prints each command instead of running it. Every command succeeds."""

    dry_run = True

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        extra_env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> Result[None, ProcessError]:
        prefix = ""
        if extra_env:
            prefix = " ".join(f"{k}={shlex.quote(v)}" for k, v in sorted(extra_env.items())) + " "
        stdin = " < (stdin)" if input_text is not None else ""
        self._console.print(f"(dry-run) {prefix}{format_command(cmd)}{stdin}", Style.DIM)
        return Ok(None)
