"""The one place shipcrate starts external programs.

cargo, cargo-release, git and the ssh tools all run through `run` (output
captured, optional stdin) or `run_silent` (output streamed into the CI
log). Neither raises: a missing binary, a timeout and a non-zero exit all
come back as `Err(ProcessError)`.

    match run(["cargo", "pkgid", "-p", "probe-rs"], cwd=root):
        case Ok(stdout):
            ...
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, replace
from pathlib import Path

from shipcrate.core.result import Err, Ok, Result

__all__ = ["NOT_STARTED", "ProcessError", "run", "run_silent"]

# Exit code reported when the process never ran or was killed on timeout.
NOT_STARTED = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not start, timed out or exited non-zero.

    Attributes:
        command: argv of the command.
        returncode: Exit code, or NOT_STARTED.
        stdout: Captured output (empty for streamed commands).
        stderr: Captured error output, or the reason the command never ran.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    @property
    def started(self) -> bool:
        return self.returncode != NOT_STARTED

    def redacted(self, secret: str | None, mask: str = "***") -> ProcessError:
        """Copy with every occurrence of `secret` replaced in the output.

        Args:
            secret: Value to hide. None or empty returns self unchanged.
            mask: Replacement text.
        """
        if not secret:
            return self
        return replace(
            self,
            stdout=self.stdout.replace(secret, mask),
            stderr=self.stderr.replace(secret, mask),
        )


def _not_started(cmd: list[str], reason: str, stdout: str = "") -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd), NOT_STARTED, stdout, reason))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    input: str | None = None,
) -> Result[str, ProcessError]:
    """Run a command to completion and return its stdout.

    Args:
        cmd: argv.
        cwd: Working directory.
        env: Full child environment (None inherits ours).
        timeout: Seconds before the command is killed.
        input: Text fed to stdin. Secrets go here, never into argv.

    Returns:
        Ok(stdout) on exit 0. Err(ProcessError) on a non-zero exit, or with
        returncode NOT_STARTED when the command could not start or timed out.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _not_started(cmd, f"Command timed out after {timeout}s", partial)
    except OSError as e:
        return _not_started(cmd, str(e))

    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run a command with stdout/stderr going straight to the terminal.

    cargo-release reports progress on stderr, so streaming keeps it in the
    job log; on failure only the exit code is known.

    Args:
        cmd: argv.
        cwd: Working directory.
        env: Full child environment (None inherits ours).
        timeout: Seconds before the command is killed.

    Returns:
        Ok(None) on exit 0, otherwise Err(ProcessError) with empty output.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        return _not_started(cmd, f"Command timed out after {timeout}s")
    except OSError as e:
        return _not_started(cmd, str(e))

    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, "", ""))
    return Ok(None)
