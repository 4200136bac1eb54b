from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from shipcrate.cargo.pkgid import extract_version
from shipcrate.cargo.tools import ensure_tool
from shipcrate.core.config import Config, ReleaseSecrets
from shipcrate.core.result import Err, Ok, Result
from shipcrate.git.repository import Repository
from shipcrate.github.event import CiEvent, TriggerDecision, load_event, should_release
from shipcrate.output.console import ConsoleProtocol, Style
from shipcrate.release.credentials import (
    add_signing_key,
    configure_git_identity,
    ensure_ssh_dir,
    install_system_packages,
    start_ssh_agent,
)
from shipcrate.release.errors import ReleaseError
from shipcrate.release.model import ReleasePlan, ReleaseReport
from shipcrate.release.planner import plan_release
from shipcrate.release.runner import run_plan


def auth_sock_for(config: Config, secrets: ReleaseSecrets) -> str:
    return secrets.auth_sock or config.ssh.auth_sock


def evaluate_trigger(
    *,
    config: Config,
    env: Mapping[str, str],
    event_name: str | None = None,
    event_path: Path | None = None,
) -> Result[tuple[CiEvent, TriggerDecision], ReleaseError]:
    event = load_event(env, event_name=event_name, event_path=event_path)
    if isinstance(event, Err):
        return event
    decision = should_release(
        event.value, label=config.release.label, branches=config.release.branches
    )
    return Ok((event.value, decision))


def prepare_host(
    *,
    workspace_root: Path,
    config: Config,
    secrets: ReleaseSecrets,
    console: ConsoleProtocol,
    home: Path,
    system: bool = True,
    ssh: bool = True,
    git: bool = True,
) -> Result[None, ReleaseError]:
    if system and config.setup.system_packages:
        with console.group("Install system packages"):
            ok = install_system_packages(
                config.setup.system_packages, cwd=workspace_root, console=console
            )
            if isinstance(ok, Err):
                return ok

    if ssh:
        with console.group("Install SSH signing key"):
            for tool in ("ssh-agent", "ssh-add"):
                found = ensure_tool(tool)
                if isinstance(found, Err):
                    return found

            sock = auth_sock_for(config, secrets)
            agent = start_ssh_agent(sock, cwd=workspace_root)
            if isinstance(agent, Err):
                return agent
            if agent.value.reused:
                console.print(f"ssh-agent: reusing {sock}", Style.DIM)
            else:
                console.print(f"ssh-agent: started on {sock} (pid {agent.value.pid})", Style.DIM)

            added = add_signing_key(sock, secrets.signing_key, cwd=workspace_root)
            if isinstance(added, Err):
                return added

            ssh_dir = ensure_ssh_dir(home)
            if isinstance(ssh_dir, Err):
                return ssh_dir
            console.success("signing key loaded")

    if git:
        with console.group("Git setup"):
            found = ensure_tool("git")
            if isinstance(found, Err):
                return found
            applied = configure_git_identity(Repository(workspace_root), config.git)
            if isinstance(applied, Err):
                return applied
            if applied.value:
                console.success(f"git config: {', '.join(applied.value)}")
            else:
                console.print("git config: nothing to set", Style.DIM)

    return Ok(None)


def resolve_version(*, workspace_root: Path, config: Config) -> Result[str, ReleaseError]:
    return extract_version(workspace_root, config.release.crate)


def build_plan(
    *,
    workspace_root: Path,
    config: Config,
    secrets: ReleaseSecrets,
    execute: bool,
    checkout: bool,
) -> Result[ReleasePlan, ReleaseError]:
    return resolve_version(workspace_root=workspace_root, config=config).and_then(
        lambda version: plan_release(
            config,
            version=version,
            token=secrets.registry_token,
            execute=execute,
            checkout=checkout,
        )
    )


def publish_release(
    *,
    workspace_root: Path,
    config: Config,
    secrets: ReleaseSecrets,
    console: ConsoleProtocol,
    env: Mapping[str, str],
    execute: bool = True,
    checkout: bool = True,
) -> Result[ReleaseReport, ReleaseError]:
    for tool in ("git", "cargo", "cargo-release"):
        found = ensure_tool(tool)
        if isinstance(found, Err):
            return found

    plan = build_plan(
        workspace_root=workspace_root,
        config=config,
        secrets=secrets,
        execute=execute,
        checkout=checkout,
    )
    if isinstance(plan, Err):
        return plan

    console.header(f"Releasing {plan.value.version}" + ("" if execute else " (dry run)"))
    if not checkout:
        branch = Repository(workspace_root).current_branch()
        if branch != config.release.branch:
            console.warning(
                f"releasing from '{branch or 'detached HEAD'}',"
                f" not '{config.release.branch}'"
            )

    # cargo-release signs tags through the agent started by `setup`.
    child_env = dict(env)
    sock = auth_sock_for(config, secrets)
    if Path(sock).exists():
        child_env["SSH_AUTH_SOCK"] = sock
    return run_plan(plan.value, workspace_root=workspace_root, console=console, env=child_env)
