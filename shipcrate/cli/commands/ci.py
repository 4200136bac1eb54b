from __future__ import annotations

from pathlib import Path

import typer

from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.commands.publish import run_publish
from shipcrate.cli.context import build_context
from shipcrate.core.result import Err
from shipcrate.github.outputs import set_output
from shipcrate.output.console import Style
from shipcrate.release.service import evaluate_trigger, prepare_host, resolve_version


def ci(
    dry_run: bool = typer.Option(False, "--dry-run", help="Run cargo-release without --execute."),
    skip_setup: bool = typer.Option(False, "--skip-setup", help="Host is already prepared."),
) -> None:
    """Full CI release: trigger check, setup, version, publish."""
    ctx = build_context()

    trig = evaluate_trigger(config=ctx.config, env=ctx.env)
    if isinstance(trig, Err):
        fail(trig.error, ctx.console)
    _, decision = trig.value
    if not decision.release:
        ctx.console.print(f"no release: {decision.reason}", Style.DIM)
        return
    ctx.console.info(f"release: {decision.reason}")

    if not skip_setup:
        prepared = prepare_host(
            workspace_root=ctx.workspace_root,
            config=ctx.config,
            secrets=ctx.secrets,
            console=ctx.console,
            home=Path.home(),
        )
        if isinstance(prepared, Err):
            fail(prepared.error, ctx.console)

    version = resolve_version(workspace_root=ctx.workspace_root, config=ctx.config)
    if isinstance(version, Err):
        fail(version.error, ctx.console)
    written = set_output(ctx.env, "version", version.value, ctx.console)
    if isinstance(written, Err):
        fail(written.error, ctx.console)

    run_publish(ctx, dry_run=dry_run, no_checkout=False)
