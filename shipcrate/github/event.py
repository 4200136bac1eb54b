"""Decide whether a CI event should cut a release.

A release runs on a manual dispatch, or when a pull request that carries
the release label is merged (closed + merged) into a release branch.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from shipcrate.core.result import Err, Ok, Result
from shipcrate.core.structured import as_obj_list, as_str_dict, get_bool, get_str, get_table
from shipcrate.release.errors import ReleaseError

__all__ = [
    "CiEvent",
    "TriggerDecision",
    "branch_matches",
    "branches_match",
    "load_event",
    "parse_event",
    "should_release",
]

_PR_EVENTS = frozenset({"pull_request", "pull_request_target"})


@dataclass(frozen=True, slots=True)
class CiEvent:
    """The parts of a GitHub event payload that decide a release.

    Attributes:
        name: Event name (GITHUB_EVENT_NAME), e.g. "pull_request".
        action: Payload action, e.g. "closed" (None for dispatches).
        merged: Whether the pull request was merged.
        labels: Label names on the pull request.
        base_ref: Branch the pull request targets.
    """

    name: str
    action: str | None = None
    merged: bool = False
    labels: tuple[str, ...] = ()
    base_ref: str | None = None


@dataclass(frozen=True, slots=True)
class TriggerDecision:
    release: bool
    reason: str


def parse_event(name: str, payload: Mapping[str, object]) -> CiEvent:
    """Build a CiEvent from an already-decoded payload."""
    action = get_str(payload, "action")
    pr = get_table(payload, "pull_request")
    if pr is None:
        return CiEvent(name=name, action=action)

    labels: list[str] = []
    for item in as_obj_list(pr.get("labels")) or []:
        label = as_str_dict(item)
        if label is None:
            continue
        label_name = get_str(label, "name")
        if label_name is not None:
            labels.append(label_name)

    base = get_table(pr, "base") or {}
    return CiEvent(
        name=name,
        action=action,
        merged=get_bool(pr, "merged") is True,
        labels=tuple(labels),
        base_ref=get_str(base, "ref"),
    )


def load_event(
    env: Mapping[str, str],
    *,
    event_name: str | None = None,
    event_path: Path | None = None,
) -> Result[CiEvent, ReleaseError]:
    """Read the triggering event from the GitHub Actions environment.

    Explicit arguments override GITHUB_EVENT_NAME / GITHUB_EVENT_PATH.
    """
    name = (event_name or env.get("GITHUB_EVENT_NAME", "")).strip()
    if not name:
        return Err(
            ReleaseError(
                kind="invalid_event",
                message="no CI event name",
                hint="Set GITHUB_EVENT_NAME or pass --event-name",
            )
        )

    if name == "workflow_dispatch":
        return Ok(CiEvent(name=name))

    path_str = str(event_path) if event_path is not None else env.get("GITHUB_EVENT_PATH", "")
    if not path_str.strip():
        return Err(
            ReleaseError(
                kind="invalid_event",
                message=f"no event payload for '{name}'",
                hint="Set GITHUB_EVENT_PATH or pass --event-path",
            )
        )

    path = Path(path_str)
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            ReleaseError(kind="invalid_event", message=f"cannot read event payload: {e}")
        )
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(
                kind="invalid_event",
                message=f"invalid JSON in event payload: {e}",
                hint=str(path),
            )
        )

    payload = as_str_dict(obj)
    if payload is None:
        return Err(
            ReleaseError(
                kind="invalid_event",
                message="event payload must be a JSON object",
                hint=str(path),
            )
        )

    return Ok(parse_event(name, payload))


@lru_cache(maxsize=64)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if ch == "*":
            out.append("[^/]*")
        elif ch in "?+" and out:
            # Quantifies the preceding character or class.
            out.append(ch)
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1 : end].replace("\\", "\\\\")
                out.append(f"[{body}]")
                i = end + 1
                continue
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("".join(out))


def branch_matches(branch: str, pattern: str) -> bool:
    """Match a branch against a GitHub branch filter glob.

    `*` stops at `/`, `**` does not. `?` and `+` make the preceding
    character optional or repeatable, and `[0-9a-z]` is a character class.

    >>> branch_matches("release/0.24", "release/**")
    True
    >>> branch_matches("release/0.24/hotfix", "release/*")
    False
    >>> branch_matches("release", "releases?")
    True
    """
    return _compile_pattern(pattern).fullmatch(branch) is not None


def branches_match(branch: str, patterns: Sequence[str]) -> bool:
    """Apply a filter list in order; `!pattern` excludes previous matches.

    An empty filter list accepts every branch.
    """
    if not patterns:
        return True

    matched = False
    for pattern in patterns:
        if pattern.startswith("!"):
            if branch_matches(branch, pattern[1:]):
                matched = False
        elif branch_matches(branch, pattern):
            matched = True
    return matched


def should_release(
    event: CiEvent,
    *,
    label: str,
    branches: Sequence[str],
) -> TriggerDecision:
    if event.name == "workflow_dispatch":
        return TriggerDecision(release=True, reason="manual dispatch")

    if event.name not in _PR_EVENTS:
        return TriggerDecision(release=False, reason=f"event '{event.name}' never releases")

    if event.action != "closed":
        return TriggerDecision(
            release=False, reason=f"pull request action is '{event.action or 'unknown'}'"
        )

    if not event.merged:
        return TriggerDecision(release=False, reason="pull request was closed without merge")

    if label.casefold() not in {name.casefold() for name in event.labels}:
        return TriggerDecision(release=False, reason=f"pull request has no '{label}' label")

    base = event.base_ref or ""
    if not branches_match(base, branches):
        return TriggerDecision(
            release=False,
            reason=f"base branch '{base}' does not match {', '.join(branches)}",
        )

    return TriggerDecision(release=True, reason=f"merged '{label}' pull request into '{base}'")
