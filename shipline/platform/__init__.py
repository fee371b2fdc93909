"""Process execution layer."""

from .process import (
    CommandRunner,
    DryRunRunner,
    ProcessError,
    SubprocessRunner,
    format_command,
    run,
    run_silent,
)

__all__ = [
    "CommandRunner",
    "DryRunRunner",
    "ProcessError",
    "SubprocessRunner",
    "format_command",
    "run",
    "run_silent",
]
