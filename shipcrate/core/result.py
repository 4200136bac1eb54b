"""Explicit success/failure values.

Release steps shell out to cargo, git and ssh. Each of those can fail in
ordinary ways (missing binary, bad token, nothing to tag), so fallible
functions return a Result instead of raising and callers decide what a
failure means for the run.

    match extract_version(root, "probe-rs"):
        case Ok(version):
            set_output(env, "version", version, console)
        case Err(error):
            print_release_error(error, console)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A step that succeeded.

    Attributes:
        value: What the step produced (a version, captured stdout, a path).
    """

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the value, keeping the success.

        Args:
            f: Conversion applied to `value`.

        Returns:
            A new Ok holding `f(value)`.
        """
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        """Nothing to convert; returns this Ok."""
        return self

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Feed the value to the next fallible step.

        Args:
            f: Step that takes `value` and may itself fail.

        Returns:
            Whatever `f` returns.
        """
        return f(self.value)

    def unwrap_or(self, default: T) -> T:
        """Return `value`; `default` is only used by Err."""
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A step that failed.

    Attributes:
        error: Why it failed, usually a ProcessError, GitError or ReleaseError.
    """

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        """No value to transform; returns this Err."""
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Convert the error, e.g. ProcessError -> GitError.

        Args:
            f: Conversion applied to `error`.

        Returns:
            A new Err holding `f(error)`.
        """
        return Err(f(self.error))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Err[E]:
        """Skip the next step; the first failure is kept."""
        return self

    def unwrap_or(self, default: T) -> T:
        """Fall back to a value when the step failed.

        Args:
            default: Returned in place of the missing value.

        Returns:
            `default`.
        """
        return default

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
