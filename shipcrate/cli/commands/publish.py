from __future__ import annotations

import typer

from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.context import CLIContext, build_context
from shipcrate.core.result import Err
from shipcrate.output.console import Style
from shipcrate.release.service import build_plan, publish_release


def plan(
    dry_run: bool = typer.Option(False, "--dry-run", help="Plan a cargo-release dry run."),
    no_checkout: bool = typer.Option(False, "--no-checkout", help="Stay on the current branch."),
) -> None:
    """Show the release steps without running them."""
    ctx = build_context()
    result = build_plan(
        workspace_root=ctx.workspace_root,
        config=ctx.config,
        secrets=ctx.secrets,
        execute=not dry_run,
        checkout=not no_checkout,
    )
    if isinstance(result, Err):
        fail(result.error, ctx.console)

    ctx.console.header(f"Release plan for {result.value.version}")
    for group, steps in result.value.groups():
        ctx.console.print(group, Style.BOLD)
        for step in steps:
            suffix = "  (may fail)" if step.allow_failure else ""
            stdin = " < ***" if step.stdin_secret is not None else ""
            ctx.console.print(f"  $ {step.display}{stdin}{suffix}")


def run_publish(ctx: CLIContext, *, dry_run: bool, no_checkout: bool) -> None:
    result = publish_release(
        workspace_root=ctx.workspace_root,
        config=ctx.config,
        secrets=ctx.secrets,
        console=ctx.console,
        env=ctx.env,
        execute=not dry_run,
        checkout=not no_checkout,
    )
    if isinstance(result, Err):
        fail(result.error, ctx.console)

    report = result.value
    ctx.console.newline()
    done = len(report.succeeded)
    ctx.console.success(
        f"released {report.version} ({done} steps)" + (" (dry run)" if dry_run else "")
    )
    for step in report.tolerated:
        ctx.console.print(f"skipped: {step.name}", Style.DIM)


def publish(
    dry_run: bool = typer.Option(False, "--dry-run", help="Run cargo-release without --execute."),
    no_checkout: bool = typer.Option(False, "--no-checkout", help="Stay on the current branch."),
) -> None:
    """Publish, tag and push the release."""
    run_publish(build_context(), dry_run=dry_run, no_checkout=no_checkout)
