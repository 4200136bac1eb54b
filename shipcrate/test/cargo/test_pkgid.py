"""Tests for shipcrate.cargo.pkgid module."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipcrate.cargo import pkgid as pkgid_mod
from shipcrate.cargo.pkgid import (
    PackageId,
    extract_version,
    is_semver,
    manifest_version,
    parse_pkgid,
)
from shipcrate.core.result import Err, Ok
from shipcrate.platform.process import ProcessError


class TestParsePkgid:
    @pytest.mark.parametrize(
        ("pkgid", "name", "version"),
        [
            ("file:///src/probe-rs#0.24.0", "probe-rs", "0.24.0"),
            ("path+file:///src/probe-rs#0.24.0", "probe-rs", "0.24.0"),
            ("path+file:///src/crates/cli#probe-rs-tools@0.24.0", "probe-rs-tools", "0.24.0"),
            (
                "registry+https://github.com/rust-lang/crates.io-index#probe-rs@0.24.0",
                "probe-rs",
                "0.24.0",
            ),
            (
                "https://github.com/rust-lang/crates.io-index#probe-rs:0.24.0",
                "probe-rs",
                "0.24.0",
            ),
            ("probe-rs@1.0.0-rc.1+build.5", "probe-rs", "1.0.0-rc.1+build.5"),
        ],
    )
    def test_spellings(self, pkgid: str, name: str, version: str) -> None:
        result = parse_pkgid(pkgid + "\n")
        assert isinstance(result, Ok)
        assert result.value.name == name
        assert result.value.version == version

    def test_source_is_kept(self) -> None:
        result = parse_pkgid("path+file:///src/probe-rs#0.24.0")
        assert result == Ok(
            PackageId(name="probe-rs", version="0.24.0", source="path+file:///src/probe-rs")
        )

    def test_rejects_non_semver(self) -> None:
        result = parse_pkgid("file:///src/probe-rs#0.24")
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"

    def test_rejects_empty(self) -> None:
        assert isinstance(parse_pkgid("   "), Err)


def test_is_semver() -> None:
    assert is_semver("0.24.0")
    assert is_semver("1.0.0-alpha.1")
    assert not is_semver("01.0.0")
    assert not is_semver("v1.0.0")


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class TestManifestVersion:
    def test_root_package(self, tmp_path: Path) -> None:
        _write(tmp_path / "Cargo.toml", '[package]\nname = "probe-rs"\nversion = "0.24.0"\n')
        assert manifest_version(tmp_path) == Ok("0.24.0")
        assert manifest_version(tmp_path, "probe-rs") == Ok("0.24.0")

    def test_workspace_member_with_inherited_version(self, tmp_path: Path) -> None:
        _write(
            tmp_path / "Cargo.toml",
            '[workspace]\nmembers = ["probe-rs", "crates/*"]\n'
            '[workspace.package]\nversion = "0.25.0"\n',
        )
        _write(
            tmp_path / "probe-rs" / "Cargo.toml",
            '[package]\nname = "probe-rs"\nversion.workspace = true\n',
        )
        _write(
            tmp_path / "crates" / "mi" / "Cargo.toml",
            '[package]\nname = "probe-rs-mi"\nversion = "0.3.1"\n',
        )
        assert manifest_version(tmp_path, "probe-rs") == Ok("0.25.0")
        assert manifest_version(tmp_path, "probe-rs-mi") == Ok("0.3.1")

    def test_excluded_member_is_ignored(self, tmp_path: Path) -> None:
        _write(
            tmp_path / "Cargo.toml",
            '[workspace]\nmembers = ["crates/*"]\nexclude = ["crates/old"]\n',
        )
        _write(
            tmp_path / "crates" / "old" / "Cargo.toml",
            '[package]\nname = "old"\nversion = "1.0.0"\n',
        )
        result = manifest_version(tmp_path, "old")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_virtual_manifest_without_crate(self, tmp_path: Path) -> None:
        _write(tmp_path / "Cargo.toml", '[workspace]\nmembers = []\n')
        result = manifest_version(tmp_path)
        assert isinstance(result, Err)
        assert result.error.hint == "Set [release].crate in shipcrate.toml"

    def test_inherited_without_workspace_version(self, tmp_path: Path) -> None:
        _write(
            tmp_path / "Cargo.toml",
            '[package]\nname = "a"\nversion.workspace = true\n[workspace]\n',
        )
        result = manifest_version(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "manifest_error"

    def test_missing_manifest(self, tmp_path: Path) -> None:
        result = manifest_version(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "manifest_error"

    def test_invalid_version(self, tmp_path: Path) -> None:
        _write(tmp_path / "Cargo.toml", '[package]\nname = "a"\nversion = "1.0"\n')
        result = manifest_version(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"


class TestExtractVersion:
    def test_uses_cargo_pkgid(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            calls.append(cmd)
            return Ok("path+file:///src/probe-rs#0.24.0\n")

        monkeypatch.setattr(pkgid_mod, "run_process", fake_run)

        assert extract_version(tmp_path, "probe-rs") == Ok("0.24.0")
        assert calls == [["cargo", "pkgid", "-p", "probe-rs"]]

    def test_without_crate(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            calls.append(cmd)
            return Ok("file:///src/probe-rs#0.24.0\n")

        monkeypatch.setattr(pkgid_mod, "run_process", fake_run)

        assert extract_version(tmp_path) == Ok("0.24.0")
        assert calls == [["cargo", "pkgid"]]

    def test_falls_back_to_manifest(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            return Err(ProcessError(tuple(cmd), -1, "", "No such file or directory: 'cargo'"))

        monkeypatch.setattr(pkgid_mod, "run_process", fake_run)
        _write(tmp_path / "Cargo.toml", '[package]\nname = "probe-rs"\nversion = "0.24.0"\n')

        assert extract_version(tmp_path, "probe-rs") == Ok("0.24.0")

    def test_both_fail_reports_cargo_stderr(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            return Err(ProcessError(tuple(cmd), 101, "", "error: package ID specification `x`"))

        monkeypatch.setattr(pkgid_mod, "run_process", fake_run)

        result = extract_version(tmp_path, "x")
        assert isinstance(result, Err)
        assert result.error.hint == "error: package ID specification `x`"

    def test_invalid_cargo_output(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cmd, cwd, timeout
            return Ok("file:///src/probe-rs#garbage\n")

        monkeypatch.setattr(pkgid_mod, "run_process", fake_run)

        result = extract_version(tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
