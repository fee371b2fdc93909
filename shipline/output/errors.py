"""Error presentation and exit code mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipline.core.errors import ErrorCode
from shipline.output.console import Style
from shipline.pipeline.errors import StageError

if TYPE_CHECKING:
    from shipline.core.config import ConfigError
    from shipline.output.console import ConsoleProtocol

__all__ = ["print_config_error", "print_stage_error", "stage_error_exit_code"]


def print_stage_error(error: StageError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def stage_error_exit_code(error: StageError) -> int:
    """Map a failure family to the process exit code."""
    match error.kind:
        case "config_invalid":
            return int(ErrorCode.USER_ERROR)
        case "checkout_failed" | "tool_missing":
            return int(ErrorCode.ENV_ERROR)
        case "metadata_failed":
            return int(ErrorCode.METADATA_ERROR)
        case "build_failed":
            return int(ErrorCode.BUILD_ERROR)
        case "test_failed":
            return int(ErrorCode.TEST_ERROR)
        case "scan_failed":
            return int(ErrorCode.SCAN_ERROR)
        case "auth_failed":
            return int(ErrorCode.AUTH_ERROR)
        case "push_failed" | "deploy_failed":
            return int(ErrorCode.DEPLOY_ERROR)
