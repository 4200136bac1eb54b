"""Process exit codes for shipcrate commands.

A CI job only sees the exit status, so the values are part of the tool's
interface and must stay stable:
- 0: Success (including "event does not trigger a release")
- 1: User error (bad arguments, invalid config, unreadable event)
- 2: Environment error (missing tools, missing credentials)
- 3: Release error (a cargo/git step failed)
- 4: Network error (download failed)
- 5: I/O error (cannot write outputs or binaries)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
