"""Crate version extraction.

The release is named after the version of one crate. cargo knows it best
(`cargo pkgid`), but its package-id spelling has changed over the years:

    file:///src/probe-rs#0.24.0
    path+file:///src/probe-rs#0.24.0
    path+file:///src/crates/cli#probe-rs-tools@0.24.0
    registry+https://github.com/rust-lang/crates.io-index#probe-rs@0.24.0
    https://github.com/rust-lang/crates.io-index#probe-rs:0.24.0

When cargo is unavailable the manifest is read directly, including
`version.workspace = true` inheritance.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from shipcrate.core.result import Err, Ok, Result
from shipcrate.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_str,
    get_str_list,
    get_table,
)
from shipcrate.platform.process import run as run_process
from shipcrate.release.errors import ReleaseError
from shipcrate.release.timeouts import LOCAL_TIMEOUT_SECONDS

__all__ = [
    "PackageId",
    "extract_version",
    "is_semver",
    "manifest_version",
    "parse_pkgid",
]

# semver.org 2.0.0
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class PackageId:
    name: str
    version: str
    source: str


def is_semver(version: str) -> bool:
    return _SEMVER_RE.match(version) is not None


def parse_pkgid(raw: str) -> Result[PackageId, ReleaseError]:
    text = raw.strip()
    if not text:
        return Err(ReleaseError(kind="invalid_version", message="empty package id"))

    if "#" in text:
        source, fragment = text.split("#", 1)
    else:
        source, fragment = "", text

    if "@" in fragment:
        name, version = fragment.rsplit("@", 1)
    elif ":" in fragment:
        name, version = fragment.split(":", 1)
    else:
        name, version = "", fragment

    if not name:
        name = source.rstrip("/").rsplit("/", 1)[-1]

    version = version.strip()
    if not is_semver(version):
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"not a semver version: '{version}'",
                hint=text,
            )
        )

    return Ok(PackageId(name=name.strip(), version=version, source=source))


def extract_version(
    workspace_root: Path,
    crate: str | None = None,
) -> Result[str, ReleaseError]:
    """Version of `crate` (or of the root package when None)."""
    cmd = ["cargo", "pkgid"]
    if crate:
        cmd += ["-p", crate]

    result = run_process(cmd, cwd=workspace_root, timeout=LOCAL_TIMEOUT_SECONDS)
    if isinstance(result, Ok):
        lines = [ln for ln in result.value.splitlines() if ln.strip()]
        if lines:
            parsed = parse_pkgid(lines[-1])
            if isinstance(parsed, Err):
                return parsed
            return Ok(parsed.value.version)

    fallback = manifest_version(workspace_root, crate)
    if isinstance(fallback, Ok):
        return fallback

    if isinstance(result, Err):
        cargo_err = result.error.stderr.strip()
        return Err(
            ReleaseError(
                kind=fallback.error.kind,
                message=fallback.error.message,
                hint=cargo_err or fallback.error.hint,
            )
        )
    return fallback


def _read_manifest(path: Path) -> Result[StrDict, ReleaseError]:
    try:
        obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(ReleaseError(kind="manifest_error", message=f"cannot read {path}: {e}"))
    except tomllib.TOMLDecodeError as e:
        return Err(ReleaseError(kind="manifest_error", message=f"invalid TOML in {path}: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ReleaseError(kind="manifest_error", message=f"invalid manifest: {path}"))
    return Ok(data)


def _package_version(
    package: StrDict, root: StrDict, manifest: Path
) -> Result[str, ReleaseError]:
    raw = package.get("version")
    inherited = as_str_dict(raw)
    if inherited is not None and get_bool(inherited, "workspace") is True:
        ws_package = get_table(get_table(root, "workspace") or {}, "package") or {}
        version = get_str(ws_package, "version")
        if version is None:
            return Err(
                ReleaseError(
                    kind="manifest_error",
                    message="version.workspace = true but [workspace.package] has no version",
                    hint=str(manifest),
                )
            )
    else:
        version = get_str(package, "version")
        if version is None:
            return Err(
                ReleaseError(
                    kind="manifest_error",
                    message=f"no package version in {manifest}",
                )
            )

    if not is_semver(version):
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"not a semver version: '{version}'",
                hint=str(manifest),
            )
        )
    return Ok(version)


def _member_manifests(workspace_root: Path, root: StrDict) -> list[Path]:
    workspace = get_table(root, "workspace") or {}
    members = get_str_list(workspace, "members") or []
    excluded = {(workspace_root / e).resolve() for e in get_str_list(workspace, "exclude") or []}

    out: list[Path] = []
    for member in members:
        dirs = (
            sorted(workspace_root.glob(member))
            if any(ch in member for ch in "*?[")
            else [workspace_root / member]
        )
        for d in dirs:
            manifest = d / "Cargo.toml"
            if d.resolve() in excluded or not manifest.is_file():
                continue
            out.append(manifest)
    return out


def manifest_version(
    workspace_root: Path,
    crate: str | None = None,
) -> Result[str, ReleaseError]:
    """Read a crate version from Cargo.toml files without invoking cargo."""
    root_manifest = workspace_root / "Cargo.toml"
    root_result = _read_manifest(root_manifest)
    if isinstance(root_result, Err):
        return root_result
    root = root_result.value

    root_package = get_table(root, "package")
    if root_package is not None and (crate is None or get_str(root_package, "name") == crate):
        return _package_version(root_package, root, root_manifest)

    if crate is None:
        return Err(
            ReleaseError(
                kind="manifest_error",
                message="virtual workspace manifest has no package version",
                hint="Set [release].crate in shipcrate.toml",
            )
        )

    for manifest in _member_manifests(workspace_root, root):
        member = _read_manifest(manifest)
        if isinstance(member, Err):
            return member
        package = get_table(member.value, "package")
        if package is None or get_str(package, "name") != crate:
            continue
        return _package_version(package, root, manifest)

    return Err(
        ReleaseError(
            kind="manifest_error",
            message=f"crate '{crate}' not found in workspace",
            hint=str(root_manifest),
        )
    )
