from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "tool_missing",
    "credentials_missing",
    "unsupported_platform",
    "ssh_failed",
    "git_failed",
    "invalid_config",
    "invalid_event",
    "invalid_version",
    "manifest_error",
    "step_failed",
    "download_failed",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
