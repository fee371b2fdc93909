"""Error payload shared by every stage of a release."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["StageError", "StageErrorKind"]

StageErrorKind = Literal[
    "config_invalid",
    "checkout_failed",
    "metadata_failed",
    "tool_missing",
    "build_failed",
    "test_failed",
    "scan_failed",
    "auth_failed",
    "push_failed",
    "deploy_failed",
]


@dataclass(frozen=True, slots=True)
class StageError:
    """Why a stage (or the preflight) failed.

    Attributes:
        kind: Failure family, used to pick the exit code
        message: One-line description for the console
        hint: Optional next step for the user
        returncode: Exit code of the failing tool, when one ran
    """

    kind: StageErrorKind
    message: str
    hint: str | None = None
    returncode: int | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
