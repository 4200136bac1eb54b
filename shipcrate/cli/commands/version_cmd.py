from __future__ import annotations

from dataclasses import replace

import typer

from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.context import build_context
from shipcrate.core.result import Err
from shipcrate.github.outputs import set_output
from shipcrate.release.service import resolve_version


def version(
    crate: str | None = typer.Option(
        None, "--crate", "-p", help="Crate to read (default: [release].crate)."
    ),
    output_name: str = typer.Option("version", "--output-name", help="Step output name."),
) -> None:
    """Extract the crate version and publish it as a step output."""
    ctx = build_context()
    config = ctx.config
    if crate:
        config = replace(config, release=replace(config.release, crate=crate))

    result = resolve_version(workspace_root=ctx.workspace_root, config=config)
    if isinstance(result, Err):
        fail(result.error, ctx.console)

    written = set_output(ctx.env, output_name, result.value, ctx.console)
    if isinstance(written, Err):
        fail(written.error, ctx.console)
