"""Exit codes for the gitmeta CLI.

The upload command only distinguishes success from failure: a missing API
key, a directory that cannot be entered, and a tracked-files upload that
exhausted its retries all exit with the same code.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are part of the CLI contract."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
