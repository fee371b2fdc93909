"""Stage plan types and the fail-fast runner."""

from .errors import StageError, StageErrorKind
from .model import RunReport, Stage, StageOutcome, StageRuntime, StageStatus
from .runner import StageRunner

__all__ = [
    "RunReport",
    "Stage",
    "StageError",
    "StageErrorKind",
    "StageOutcome",
    "StageRunner",
    "StageRuntime",
    "StageStatus",
]
