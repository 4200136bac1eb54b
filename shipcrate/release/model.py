from __future__ import annotations

import shlex
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

StepStatus = Literal["ok", "failed_allowed"]


@dataclass(frozen=True, slots=True)
class ReleaseStep:
    """One external command of the release sequence.

    Attributes:
        name: Short label shown in summaries.
        group: Log group the step is folded under.
        argv: Command and arguments.
        allow_failure: Keep going if the command fails.
        stdin_secret: Secret written to stdin; never shown or repr'd.
    """

    name: str
    group: str
    argv: tuple[str, ...]
    allow_failure: bool = False
    stdin_secret: str | None = field(default=None, repr=False)

    @property
    def display(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    version: str
    steps: tuple[ReleaseStep, ...]
    execute: bool = True

    def groups(self) -> Iterator[tuple[str, list[ReleaseStep]]]:
        """Consecutive steps sharing a group, in order."""
        current: str | None = None
        bucket: list[ReleaseStep] = []
        for step in self.steps:
            if step.group != current and bucket:
                yield (current or "", bucket)
                bucket = []
            current = step.group
            bucket.append(step)
        if bucket:
            yield (current or "", bucket)


@dataclass(frozen=True, slots=True)
class StepOutcome:
    step: ReleaseStep
    status: StepStatus


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    version: str
    outcomes: tuple[StepOutcome, ...]

    @property
    def succeeded(self) -> list[ReleaseStep]:
        return [o.step for o in self.outcomes if o.status == "ok"]

    @property
    def tolerated(self) -> list[ReleaseStep]:
        return [o.step for o in self.outcomes if o.status == "failed_allowed"]
