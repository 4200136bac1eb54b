from __future__ import annotations

from pathlib import Path

import typer

from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.context import build_context
from shipcrate.core.result import Err
from shipcrate.release.service import prepare_host


def setup(
    skip_system: bool = typer.Option(False, "--skip-system", help="Skip system packages."),
    skip_ssh: bool = typer.Option(False, "--skip-ssh", help="Skip ssh-agent and signing key."),
    skip_git: bool = typer.Option(False, "--skip-git", help="Skip git identity."),
) -> None:
    """Prepare the host: system packages, SSH signing key, git identity."""
    ctx = build_context()
    result = prepare_host(
        workspace_root=ctx.workspace_root,
        config=ctx.config,
        secrets=ctx.secrets,
        console=ctx.console,
        home=Path.home(),
        system=not skip_system,
        ssh=not skip_ssh,
        git=not skip_git,
    )
    if isinstance(result, Err):
        fail(result.error, ctx.console)
