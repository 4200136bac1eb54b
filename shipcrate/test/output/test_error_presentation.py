"""Tests for shipcrate.output.errors module."""

from __future__ import annotations

from shipcrate.core.errors import ErrorCode
from shipcrate.output.console import MockConsole, Style
from shipcrate.output.errors import print_release_error, release_error_exit_code
from shipcrate.release.errors import ReleaseError


def test_print_with_hint() -> None:
    console = MockConsole()
    print_release_error(
        ReleaseError(kind="tool_missing", message="cargo: missing", hint="Install Rust"),
        console,
    )
    assert console.outputs[0].message == "error: cargo: missing"
    assert console.outputs[1].message == "hint: Install Rust"
    assert console.outputs[1].style == Style.DIM


def test_print_without_hint() -> None:
    console = MockConsole()
    print_release_error(ReleaseError(kind="step_failed", message="publish: failed"), console)
    assert console.messages == ["error: publish: failed"]


def test_exit_codes() -> None:
    def code(kind: str) -> int:
        error = ReleaseError(kind=kind, message="")  # type: ignore[arg-type]
        return release_error_exit_code(error)

    assert code("tool_missing") == ErrorCode.ENV_ERROR
    assert code("credentials_missing") == ErrorCode.ENV_ERROR
    assert code("ssh_failed") == ErrorCode.ENV_ERROR
    assert code("invalid_event") == ErrorCode.USER_ERROR
    assert code("invalid_version") == ErrorCode.USER_ERROR
    assert code("step_failed") == ErrorCode.RELEASE_ERROR
    assert code("download_failed") == ErrorCode.NETWORK_ERROR
    assert code("io_error") == ErrorCode.IO_ERROR
