"""Process exit codes.

Each release failure category gets its own exit code so scripts can tell
them apart. Any non-zero code means the release did not complete.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the relkit CLI.

    These values are used as process exit codes and should remain stable.
    - 0: success (or help)
    - 1: usage error
    - 1x: precondition failures, nothing was modified
    - 2x: changelog generation / configuration failures
    - 3x: local composition stopped (changelog restored when possible)
    - 4x: push failures, local commit and tag are kept
    """

    OK = 0
    USAGE_ERROR = 1

    BRANCH_MISMATCH = 10
    DIRTY_TREE = 11
    TAG_EXISTS = 12
    OUT_OF_SYNC = 13
    TESTS_FAILING = 14
    INVALID_VERSION = 15

    MISSING_UNRELEASED = 20
    CONFIG_ERROR = 21

    USER_DECLINED = 30
    COMPOSE_FAILED = 31

    PUSH_FAILED = 40

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

