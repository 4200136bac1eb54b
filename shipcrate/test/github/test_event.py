"""Tests for shipcrate.github.event module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from shipcrate.core.result import Err, Ok
from shipcrate.github.event import (
    CiEvent,
    branch_matches,
    branches_match,
    load_event,
    parse_event,
    should_release,
)

_BRANCHES = ("master", "release/**")


def _pr_payload(
    *,
    action: str = "closed",
    merged: bool = True,
    labels: tuple[str, ...] = ("release",),
    base: str = "master",
) -> dict[str, object]:
    return {
        "action": action,
        "pull_request": {
            "merged": merged,
            "labels": [{"name": name} for name in labels],
            "base": {"ref": base},
        },
    }


class TestBranchMatches:
    @pytest.mark.parametrize(
        ("branch", "pattern", "expected"),
        [
            ("master", "master", True),
            ("main", "master", False),
            ("release/0.24", "release/**", True),
            ("release/0.24/hotfix", "release/**", True),
            ("release/0.24/hotfix", "release/*", False),
            ("release/0.24", "release/*", True),
            ("releases/0.24", "release/**", False),
            ("release", "releases?", True),
            ("releases", "releases?", True),
            ("releasess", "releases?", False),
            ("v100", "v10+", True),
            ("v1", "v10+", False),
            ("release/1.4", "release/[0-9].[0-9]", True),
            ("release/x.4", "release/[0-9].[0-9]", False),
            ("rc-7", "rc-[0-9]+", True),
            ("a.b", "a.b", True),
            ("axb", "a.b", False),
        ],
    )
    def test_patterns(self, branch: str, pattern: str, expected: bool) -> None:
        assert branch_matches(branch, pattern) is expected

    def test_negation_excludes_earlier_match(self) -> None:
        patterns = ["release/**", "!release/old/**"]
        assert branches_match("release/1.0", patterns)
        assert not branches_match("release/old/1.0", patterns)

    def test_empty_filter_matches_everything(self) -> None:
        assert branches_match("anything", [])


class TestParseEvent:
    def test_pull_request(self) -> None:
        event = parse_event("pull_request", _pr_payload(labels=("release", "chore")))
        assert event == CiEvent(
            name="pull_request",
            action="closed",
            merged=True,
            labels=("release", "chore"),
            base_ref="master",
        )

    def test_malformed_labels_are_skipped(self) -> None:
        payload = _pr_payload()
        pr = payload["pull_request"]
        assert isinstance(pr, dict)
        pr["labels"] = [{"name": "release"}, "bogus", {"id": 1}]
        event = parse_event("pull_request", payload)
        assert event.labels == ("release",)

    def test_non_pr_payload(self) -> None:
        event = parse_event("push", {"ref": "refs/heads/master"})
        assert event == CiEvent(name="push")


class TestShouldRelease:
    def test_workflow_dispatch(self) -> None:
        decision = should_release(
            CiEvent(name="workflow_dispatch"), label="release", branches=_BRANCHES
        )
        assert decision.release
        assert decision.reason == "manual dispatch"

    def test_merged_labelled_pr(self) -> None:
        event = parse_event("pull_request", _pr_payload(base="release/0.24"))
        decision = should_release(event, label="release", branches=_BRANCHES)
        assert decision.release

    def test_not_merged(self) -> None:
        event = parse_event("pull_request", _pr_payload(merged=False))
        decision = should_release(event, label="release", branches=_BRANCHES)
        assert not decision.release
        assert "without merge" in decision.reason

    def test_missing_label(self) -> None:
        event = parse_event("pull_request", _pr_payload(labels=("docs",)))
        decision = should_release(event, label="release", branches=_BRANCHES)
        assert not decision.release
        assert "'release' label" in decision.reason

    def test_label_is_case_insensitive(self) -> None:
        event = CiEvent(
            name="pull_request",
            action="closed",
            merged=True,
            labels=("Release",),
            base_ref="master",
        )
        decision = should_release(event, label="release", branches=["master"])
        assert decision.release

    def test_not_closed(self) -> None:
        event = parse_event("pull_request", _pr_payload(action="synchronize"))
        decision = should_release(event, label="release", branches=_BRANCHES)
        assert not decision.release
        assert "synchronize" in decision.reason

    def test_wrong_base_branch(self) -> None:
        event = parse_event("pull_request", _pr_payload(base="feature/x"))
        decision = should_release(event, label="release", branches=_BRANCHES)
        assert not decision.release
        assert "feature/x" in decision.reason

    def test_other_events_never_release(self) -> None:
        decision = should_release(CiEvent(name="push"), label="release", branches=_BRANCHES)
        assert not decision.release


class TestLoadEvent:
    def test_dispatch_needs_no_payload(self) -> None:
        result = load_event({"GITHUB_EVENT_NAME": "workflow_dispatch"})
        assert result == Ok(CiEvent(name="workflow_dispatch"))

    def test_reads_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(_pr_payload()), encoding="utf-8")
        result = load_event({"GITHUB_EVENT_NAME": "pull_request", "GITHUB_EVENT_PATH": str(path)})
        assert isinstance(result, Ok)
        assert result.value.merged

    def test_arguments_override_env(self, tmp_path: Path) -> None:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(_pr_payload()), encoding="utf-8")
        result = load_event(
            {"GITHUB_EVENT_NAME": "push"}, event_name="pull_request", event_path=path
        )
        assert isinstance(result, Ok)
        assert result.value.name == "pull_request"

    def test_missing_name(self) -> None:
        result = load_event({})
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_event"

    def test_missing_payload_path(self) -> None:
        result = load_event({"GITHUB_EVENT_NAME": "pull_request"})
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_event"

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "event.json"
        path.write_text("{not json", encoding="utf-8")
        result = load_event({"GITHUB_EVENT_NAME": "pull_request", "GITHUB_EVENT_PATH": str(path)})
        assert isinstance(result, Err)
        assert "invalid JSON" in result.error.message

    def test_non_object_payload(self, tmp_path: Path) -> None:
        path = tmp_path / "event.json"
        path.write_text("[]", encoding="utf-8")
        result = load_event({"GITHUB_EVENT_NAME": "pull_request", "GITHUB_EVENT_PATH": str(path)})
        assert isinstance(result, Err)

    def test_unreadable_payload(self, tmp_path: Path) -> None:
        result = load_event(
            {
                "GITHUB_EVENT_NAME": "pull_request",
                "GITHUB_EVENT_PATH": str(tmp_path / "missing.json"),
            }
        )
        assert isinstance(result, Err)
        assert "cannot read" in result.error.message
