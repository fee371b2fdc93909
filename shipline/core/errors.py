"""Exit codes for the release CLI.

One code per failure family so a calling CI job can tell a failing test
suite from a rejected registry login without parsing console output.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are part of the CLI contract.

    - 0: Release completed
    - 1: User error (bad arguments, invalid config)
    - 2: Environment error (tool missing, checkout unavailable)
    - 3: Build error (compile or package failed)
    - 4: Test error
    - 5: Scan error (only when a scan is configured as blocking)
    - 6: Authentication error (registry or cluster credentials)
    - 7: Deploy error (push or helm failed)
    - 8: Metadata error (manifest missing or incomplete)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    TEST_ERROR = 4
    SCAN_ERROR = 5
    AUTH_ERROR = 6
    DEPLOY_ERROR = 7
    METADATA_ERROR = 8

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
