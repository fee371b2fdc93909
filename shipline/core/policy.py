"""Failure policy of a pipeline stage."""

from __future__ import annotations

from enum import Enum

__all__ = ["StagePolicy", "parse_policy"]


class StagePolicy(Enum):
    """What a stage failure does to the rest of the run."""

    BLOCKING = "blocking"
    """Failure aborts the run; later stages are skipped."""

    OBSERVATIONAL = "observational"
    """Failure is reported and the run continues."""

    def __str__(self) -> str:
        return self.value


def parse_policy(raw: str) -> StagePolicy:
    """Parse a policy name from config.

    Raises:
        ValueError: If the name is not a known policy.
    """
    try:
        return StagePolicy(raw.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in StagePolicy)
        raise ValueError(f"unknown stage policy {raw!r} (expected one of: {choices})") from None
