"""Execute a release plan.

Steps run in order, folded into log groups. A step marked
`allow_failure` only produces a warning; any other failure stops the
release immediately so nothing is pushed after a failed publish.
"""

from __future__ import annotations

from pathlib import Path

from shipcrate.core.result import Err, Ok, Result
from shipcrate.output.console import ConsoleProtocol, Style
from shipcrate.platform.process import ProcessError
from shipcrate.platform.process import run as run_process
from shipcrate.platform.process import run_silent
from shipcrate.release.errors import ReleaseError
from shipcrate.release.model import ReleasePlan, ReleaseReport, ReleaseStep, StepOutcome
from shipcrate.release.timeouts import LOGIN_TIMEOUT_SECONDS

__all__ = ["run_plan", "run_step"]


def run_step(
    step: ReleaseStep,
    *,
    workspace_root: Path,
    console: ConsoleProtocol,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    if step.stdin_secret is None:
        console.print(f"$ {step.display}", Style.DIM)
        return run_silent(list(step.argv), cwd=workspace_root, env=env)

    console.mask(step.stdin_secret)
    console.print(f"$ {step.display} < ***", Style.DIM)
    result = run_process(
        list(step.argv),
        cwd=workspace_root,
        env=env,
        input=f"{step.stdin_secret}\n",
        timeout=LOGIN_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return result
    return Ok(None)


def _failure_hint(step: ReleaseStep, error: ProcessError) -> str:
    detail = error.redacted(step.stdin_secret).stderr.strip()
    return detail or step.display


def run_plan(
    plan: ReleasePlan,
    *,
    workspace_root: Path,
    console: ConsoleProtocol,
    env: dict[str, str] | None = None,
) -> Result[ReleaseReport, ReleaseError]:
    outcomes: list[StepOutcome] = []

    for group, steps in plan.groups():
        with console.group(group):
            for step in steps:
                result = run_step(step, workspace_root=workspace_root, console=console, env=env)
                if isinstance(result, Ok):
                    outcomes.append(StepOutcome(step=step, status="ok"))
                    continue

                if step.allow_failure:
                    console.warning(
                        f"{step.name}: failed (exit {result.error.returncode}), continuing"
                    )
                    outcomes.append(StepOutcome(step=step, status="failed_allowed"))
                    continue

                return Err(
                    ReleaseError(
                        kind="step_failed",
                        message=f"{step.name}: failed (exit {result.error.returncode})",
                        hint=_failure_hint(step, result.error),
                    )
                )

    return Ok(ReleaseReport(version=plan.version, outcomes=tuple(outcomes)))
