from __future__ import annotations

from pathlib import Path

import typer

from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.context import build_context
from shipcrate.core.result import Err
from shipcrate.github.outputs import set_output
from shipcrate.output.console import Style
from shipcrate.release.service import evaluate_trigger


def trigger(
    event_name: str | None = typer.Option(
        None, "--event-name", help="Event name (default: $GITHUB_EVENT_NAME)."
    ),
    event_path: Path | None = typer.Option(
        None, "--event-path", help="Event payload JSON (default: $GITHUB_EVENT_PATH)."
    ),
) -> None:
    """Decide whether the triggering CI event should release.

    Writes `release=true|false` to the step outputs. Not releasing is not
    an error.
    """
    ctx = build_context()
    result = evaluate_trigger(
        config=ctx.config, env=ctx.env, event_name=event_name, event_path=event_path
    )
    if isinstance(result, Err):
        fail(result.error, ctx.console)

    event, decision = result.value
    if decision.release:
        ctx.console.success(f"release: {decision.reason}")
    else:
        ctx.console.print(f"no release: {decision.reason}", Style.DIM)
    ctx.console.print(f"event: {event.name}", Style.DIM)

    written = set_output(ctx.env, "release", "true" if decision.release else "false", ctx.console)
    if isinstance(written, Err):
        fail(written.error, ctx.console)
