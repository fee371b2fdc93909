from __future__ import annotations

from dataclasses import dataclass

from shipline.output.console import ConsoleProtocol, RichConsole
from shipline.platform.process import CommandRunner, DryRunRunner, SubprocessRunner


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol
    commands: CommandRunner


def build_context(*, dry_run: bool = False) -> CLIContext:
    console = RichConsole()
    commands: CommandRunner = DryRunRunner(console) if dry_run else SubprocessRunner(console)
    return CLIContext(console=console, commands=commands)
