"""Console output abstraction.

Services only write through `ConsoleProtocol`. `RichConsole` renders for a
terminal and for the GitHub Actions log; `MockConsole` records output for
tests.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
    "escape_workflow_data",
    "running_in_github_actions",
]


class Style(Enum):
    """Output styles; the value is the Rich style used to render them."""

    DEFAULT = ""
    SUCCESS = "green"
    ERROR = "red bold"
    WARNING = "yellow"
    INFO = "cyan"
    DIM = "dim"
    BOLD = "bold"
    HEADER = "blue bold"

    def __str__(self) -> str:
        return self.name.lower()


def running_in_github_actions(env: Mapping[str, str] | None = None) -> bool:
    source = os.environ if env is None else env
    return source.get("GITHUB_ACTIONS", "").lower() == "true"


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...

    def group(self, title: str) -> AbstractContextManager[None]:
        """Fold everything printed inside the block under `title`."""
        ...

    def mask(self, value: str) -> None:
        """Ask the log host to redact `value` from all further output."""
        ...


_LABELS: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}


def escape_workflow_data(value: str) -> str:
    """Escape a workflow command payload the way the Actions runner expects."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class RichConsole:
    """Rich-rendered console that also speaks GitHub Actions.

    Under Actions, groups and masks become workflow commands and errors or
    warnings are repeated as `::error::`/`::warning::` annotations. Workflow
    commands bypass Rich and go to stdout verbatim.
    """

    def __init__(self, *, github_actions: bool | None = None) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self._github_actions = (
            running_in_github_actions() if github_actions is None else github_actions
        )

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=style.value or None, markup=False)

    def _labelled(self, style: Style, message: str) -> None:
        self._console.print(f"[{style.value}]{_LABELS[style]}[/] ", end="")
        self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._labelled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._labelled(Style.ERROR, message)
        self._annotate("error", message)

    def warning(self, message: str) -> None:
        self._labelled(Style.WARNING, message)
        self._annotate("warning", message)

    def info(self, message: str) -> None:
        self._labelled(Style.INFO, message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style=Style.HEADER.value, markup=False)

    def newline(self) -> None:
        self._console.print()

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        if not self._github_actions:
            self.header(title)
            yield
            return

        self._workflow_command("group", title)
        try:
            yield
        finally:
            self._workflow_command("endgroup")

    def mask(self, value: str) -> None:
        if self._github_actions and value:
            self._workflow_command("add-mask", value)

    def _annotate(self, level: str, message: str) -> None:
        if self._github_actions:
            self._workflow_command(level, message)

    def _workflow_command(self, name: str, value: str = "") -> None:
        self._console.file.flush()
        print(f"::{name}::{escape_workflow_data(value)}", flush=True)


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


@dataclass
class MockConsole:
    """Records everything instead of printing it.

    Labelled calls are stored the way they read on screen ("error: x"),
    groups as their `::group::`/`::endgroup::` markers.
    """

    outputs: list[OutputRecord] = field(default_factory=list[OutputRecord])
    masked: list[str] = field(default_factory=list[str])
    groups: list[str] = field(default_factory=list[str])

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def _labelled(self, style: Style, message: str) -> None:
        self.print(f"{_LABELS[style]} {message}", style)

    def success(self, message: str) -> None:
        self._labelled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._labelled(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._labelled(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._labelled(Style.INFO, message)

    def header(self, message: str) -> None:
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self.print("")

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        self.groups.append(title)
        self.print(f"::group::{title}", Style.HEADER)
        try:
            yield
        finally:
            self.print("::endgroup::", Style.HEADER)

    def mask(self, value: str) -> None:
        self.masked.append(value)

    def clear(self) -> None:
        for recorded in (self.outputs, self.masked, self.groups):
            recorded.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def styled(self, style: Style) -> list[str]:
        return [o.message for o in self.outputs if o.style is style]

    def has_error(self) -> bool:
        return bool(self.styled(Style.ERROR))

    def has_warning(self) -> bool:
        return bool(self.styled(Style.WARNING))

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
