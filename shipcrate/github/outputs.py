"""Step outputs ($GITHUB_OUTPUT)."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from pathlib import Path

from shipcrate.core.result import Err, Ok, Result
from shipcrate.output.console import ConsoleProtocol
from shipcrate.release.errors import ReleaseError

__all__ = ["format_output", "set_output", "write_output"]


def format_output(name: str, value: str, *, delimiter: str | None = None) -> str:
    """Render one output entry.

    Multi-line values use the heredoc form `name<<DELIM`.
    """
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"

    delim = delimiter or f"ghadelimiter_{uuid.uuid4().hex}"
    if delim in value:
        raise ValueError("output value contains its own delimiter")
    return f"{name}<<{delim}\n{value}\n{delim}\n"


def write_output(path: Path, name: str, value: str) -> Result[None, ReleaseError]:
    try:
        with path.open("a", encoding="utf-8") as f:
            f.write(format_output(name, value))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_error",
                message=f"cannot write step output '{name}': {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def set_output(
    env: Mapping[str, str],
    name: str,
    value: str,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Publish an output, or print it when not running in Actions."""
    path = env.get("GITHUB_OUTPUT", "").strip()
    if not path:
        console.print(f"{name}={value}")
        return Ok(None)
    return write_output(Path(path), name, value)
