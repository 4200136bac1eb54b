"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipcrate.core.errors import ErrorCode
from shipcrate.output.console import Style

if TYPE_CHECKING:
    from shipcrate.output.console import ConsoleProtocol
    from shipcrate.release.errors import ReleaseError

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "tool_missing" | "credentials_missing" | "unsupported_platform":
            return int(ErrorCode.ENV_ERROR)
        case "ssh_failed" | "git_failed" | "manifest_error":
            return int(ErrorCode.ENV_ERROR)
        case "invalid_config" | "invalid_event" | "invalid_version":
            return int(ErrorCode.USER_ERROR)
        case "step_failed":
            return int(ErrorCode.RELEASE_ERROR)
        case "download_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "io_error":
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.RELEASE_ERROR)
