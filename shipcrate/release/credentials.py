"""Credential and host preparation for a release run.

Covers what has to exist before cargo-release can sign and push tags:
an SSH agent holding the signing key, a git identity configured for SSH
signing, and any system packages the workspace needs to build.
"""

from __future__ import annotations

import os
import re
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from shipcrate.core.config import GitConfig
from shipcrate.core.result import Err, Ok, Result
from shipcrate.git.repository import Repository
from shipcrate.output.console import ConsoleProtocol
from shipcrate.platform.process import run as run_process
from shipcrate.release.errors import ReleaseError
from shipcrate.release.timeouts import LOCAL_TIMEOUT_SECONDS, SYSTEM_INSTALL_TIMEOUT_SECONDS

__all__ = [
    "SshAgent",
    "add_signing_key",
    "configure_git_identity",
    "ensure_ssh_dir",
    "install_system_packages",
    "normalize_key",
    "start_ssh_agent",
]

_AGENT_PID_RE = re.compile(r"SSH_AGENT_PID=(\d+)")


@dataclass(frozen=True, slots=True)
class SshAgent:
    auth_sock: str
    pid: int | None
    reused: bool


def _agent_alive(auth_sock: str, *, cwd: Path) -> bool:
    env = dict(os.environ)
    env["SSH_AUTH_SOCK"] = auth_sock
    result = run_process(["ssh-add", "-l"], cwd=cwd, env=env, timeout=LOCAL_TIMEOUT_SECONDS)
    # ssh-add exits 1 for an agent without keys and 2 when nothing answers.
    return not (isinstance(result, Err) and result.error.returncode == 2)


def start_ssh_agent(auth_sock: str, *, cwd: Path) -> Result[SshAgent, ReleaseError]:
    """Start an agent bound to `auth_sock`, or reuse one already there.

    A socket left behind by a dead agent is removed and a new agent started
    in its place.
    """
    sock = Path(auth_sock)
    if sock.exists():
        if _agent_alive(auth_sock, cwd=cwd):
            return Ok(SshAgent(auth_sock=auth_sock, pid=None, reused=True))
        try:
            sock.unlink()
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="ssh_failed",
                    message=f"stale agent socket {auth_sock} could not be removed",
                    hint=str(e),
                )
            )

    result = run_process(
        ["ssh-agent", "-s", "-a", auth_sock], cwd=cwd, timeout=LOCAL_TIMEOUT_SECONDS
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="ssh_failed",
                message=f"failed to start ssh-agent on {auth_sock}",
                hint=result.error.stderr.strip() or None,
            )
        )

    m = _AGENT_PID_RE.search(result.value)
    pid = int(m.group(1)) if m else None
    return Ok(SshAgent(auth_sock=auth_sock, pid=pid, reused=False))


def normalize_key(key: str) -> str:
    """Drop carriage returns (keys pasted from Windows) and end with a newline."""
    text = key.replace("\r", "").strip()
    return f"{text}\n" if text else ""


def add_signing_key(
    auth_sock: str,
    key: str | None,
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[None, ReleaseError]:
    material = normalize_key(key or "")
    if not material:
        return Err(
            ReleaseError(
                kind="credentials_missing",
                message="no SSH signing key",
                hint="Set SSH_SIGNING_KEY",
            )
        )

    child_env = dict(os.environ if env is None else env)
    child_env["SSH_AUTH_SOCK"] = auth_sock
    result = run_process(
        ["ssh-add", "-"], cwd=cwd, env=child_env, input=material, timeout=LOCAL_TIMEOUT_SECONDS
    )
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="ssh_failed",
                message="ssh-add rejected the signing key",
                hint=result.error.stderr.strip() or None,
            )
        )
    return Ok(None)


def ensure_ssh_dir(home: Path) -> Result[Path, ReleaseError]:
    ssh_dir = home / ".ssh"
    try:
        ssh_dir.mkdir(parents=True, exist_ok=True)
        ssh_dir.chmod(0o700)
    except OSError as e:
        return Err(ReleaseError(kind="io_error", message=f"cannot prepare {ssh_dir}: {e}"))
    return Ok(ssh_dir)


def configure_git_identity(repo: Repository, git: GitConfig) -> Result[list[str], ReleaseError]:
    """Apply the release identity; returns the keys that were changed.

    Keys that already hold the wanted value are skipped.

    Name and email are set on the repository. Signing settings are global
    because cargo-release may run git from member crate directories.
    """
    settings: list[tuple[str, str, bool]] = []
    if git.user_name:
        settings.append(("user.name", git.user_name, False))
    if git.user_email:
        settings.append(("user.email", git.user_email, False))
    if git.signing_key:
        settings.append(("gpg.format", git.signing_format, True))
        settings.append(("user.signingkey", git.signing_key, True))

    applied: list[str] = []
    for key, value, global_ in settings:
        if repo.get_config(key, global_=global_) == value:
            continue
        result = repo.set_config(key, value, global_=global_)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"git config {key} failed",
                    hint=result.error.message,
                )
            )
        applied.append(key)
    return Ok(applied)


def install_system_packages(
    packages: tuple[str, ...],
    *,
    cwd: Path,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    if not packages:
        return Ok(None)

    if shutil.which("apt-get") is None:
        console.warning(f"apt-get not found; install manually: {' '.join(packages)}")
        return Ok(None)

    sudo = ["sudo"] if shutil.which("sudo") is not None and os.geteuid() != 0 else []
    for cmd in (
        [*sudo, "apt-get", "update", "-y"],
        [*sudo, "apt-get", "install", "-y", *packages],
    ):
        result = run_process(cmd, cwd=cwd, timeout=SYSTEM_INSTALL_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="tool_missing",
                    message=f"{' '.join(cmd[:3])} failed",
                    hint=result.error.stderr.strip() or None,
                )
            )
    return Ok(None)
