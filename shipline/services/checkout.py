"""Source checkout.

With a repository URL the source is cloned (shallow, single branch) into
the target directory, which must be missing or empty. Without one, the
target directory is used as it is.
"""

from __future__ import annotations

from pathlib import Path

from shipline.core.result import Err, Ok, Result
from shipline.pipeline.errors import StageError
from shipline.platform.process import CommandRunner

__all__ = ["checkout", "clone_command"]


def clone_command(url: str, branch: str, target: Path) -> list[str]:
    return ["git", "clone", "--branch", branch, "--depth", "1", url, str(target)]


def checkout(
    *,
    source_dir: Path,
    url: str | None,
    branch: str,
    commands: CommandRunner,
) -> Result[Path, StageError]:
    """Make the source tree available and return its directory."""
    if url is None:
        if not source_dir.is_dir():
            return Err(
                StageError(
                    kind="checkout_failed",
                    message=f"source directory not found: {source_dir}",
                    hint="Pass an existing checkout or --repo to clone one",
                )
            )
        return Ok(source_dir)

    if source_dir.exists() and (not source_dir.is_dir() or any(source_dir.iterdir())):
        return Err(
            StageError(
                kind="checkout_failed",
                message=f"clone target is not empty: {source_dir}",
                hint="Point the source argument at a new directory",
            )
        )

    parent = source_dir.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(StageError(kind="checkout_failed", message=f"cannot create {parent}: {e}"))

    result = commands.run(clone_command(url, branch, source_dir), cwd=parent)
    if isinstance(result, Err):
        e = result.error
        return Err(
            StageError(
                kind="tool_missing" if e.not_found else "checkout_failed",
                message=f"git clone {url} failed",
                hint=e.stderr.strip() or None,
                returncode=e.returncode,
            )
        )
    return Ok(source_dir)
