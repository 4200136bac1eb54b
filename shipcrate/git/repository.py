"""The git operations a release needs.

Check out the release branch, read and write the identity and signing
settings. Reads that fail count as "unset"; writes return a `GitError`.

    repo = Repository(workspace_root)
    if isinstance(repo.checkout("master"), Err):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipcrate.core.result import Result
from shipcrate.platform.process import ProcessError
from shipcrate.platform.process import run as run_process

__all__ = ["GitError", "Repository"]

_GIT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class GitError:
    """A git command that failed.

    Attributes:
        command: git subcommand and its main argument, e.g. "checkout master".
        message: git's own complaint (stderr, then stdout) or a fallback.
        returncode: Exit code of git.
    """

    command: str
    message: str
    returncode: int = 1

    @classmethod
    def from_process(cls, command: str, error: ProcessError) -> GitError:
        detail = error.stderr.strip() or error.stdout.strip()
        return cls(
            command=command,
            message=detail or f"git {command} failed",
            returncode=error.returncode,
        )


def _branch_name(stdout: str) -> str | None:
    name = stdout.strip()
    # rev-parse prints "HEAD" on a detached checkout.
    return None if name in ("", "HEAD") else name


def _config_args(key: str, value: str | None, *, global_: bool) -> list[str]:
    args = ["config"]
    if global_:
        args.append("--global")
    return [*args, key, value] if value is not None else [*args, "--get", key]


class Repository:
    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """True for a checkout or a worktree (`.git` dir or file)."""
        return (self.path / ".git").exists()

    def current_branch(self) -> str | None:
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).map(_branch_name).unwrap_or(None)

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._write(["checkout", branch], f"checkout {branch}")

    def get_config(self, key: str, *, global_: bool = False) -> str | None:
        result = self._run(_config_args(key, None, global_=global_))
        return result.map(lambda out: out.strip() or None).unwrap_or(None)

    def set_config(self, key: str, value: str, *, global_: bool = False) -> Result[None, GitError]:
        return self._write(_config_args(key, value, global_=global_), f"config {key}")

    def _write(self, args: list[str], label: str) -> Result[None, GitError]:
        return (
            self._run(args)
            .map(lambda _: None)
            .map_err(lambda e: GitError.from_process(label, e))
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )
