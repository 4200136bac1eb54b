"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from shipcrate.output.console import ConsoleProtocol
from shipcrate.output.errors import print_release_error, release_error_exit_code
from shipcrate.release.errors import ReleaseError


def fail(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    """Print a release error and exit with its mapped code."""
    print_release_error(error, console)
    raise typer.Exit(code=release_error_exit_code(error))
