"""Discovery and installation of the external release tools.

cargo-release is installed from its prebuilt GitHub release archives
rather than `cargo install`, which would compile it on every CI run.
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
import tempfile
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from shipcrate.core.result import Err, Ok, Result
from shipcrate.platform.detection import PlatformInfo, rust_target_triple
from shipcrate.release.errors import ReleaseError
from shipcrate.tools.http import HttpClient

__all__ = [
    "CARGO_RELEASE_REPO",
    "InstallResult",
    "cargo_bin_dir",
    "cargo_release_url",
    "ensure_tool",
    "install_cargo_release",
]

CARGO_RELEASE_REPO = "crate-ci/cargo-release"

TOOL_HINTS: dict[str, str] = {
    "cargo": "Install Rust via https://rustup.rs/",
    "cargo-release": "Run: shipcrate install-cargo-release",
    "git": "Install git: https://git-scm.com/downloads",
    "ssh-agent": "Install an OpenSSH client (e.g. apt-get install openssh-client)",
    "ssh-add": "Install an OpenSSH client (e.g. apt-get install openssh-client)",
}


@dataclass(frozen=True, slots=True)
class InstallResult:
    path: Path
    version: str
    already_installed: bool


def ensure_tool(name: str, *, hint: str | None = None) -> Result[Path, ReleaseError]:
    found = shutil.which(name)
    if found is None:
        return Err(
            ReleaseError(
                kind="tool_missing",
                message=f"{name}: missing",
                hint=hint or TOOL_HINTS.get(name),
            )
        )
    return Ok(Path(found))


def cargo_bin_dir(env: Mapping[str, str], *, home: Path | None = None) -> Path:
    """`$CARGO_HOME/bin`, defaulting to `~/.cargo/bin`."""
    cargo_home = env.get("CARGO_HOME", "").strip()
    if cargo_home:
        return Path(cargo_home).expanduser() / "bin"
    return (home or Path.home()) / ".cargo" / "bin"


def cargo_release_url(version: str, triple: str) -> str:
    v = version.removeprefix("v")
    ext = "zip" if "windows" in triple else "tar.gz"
    return (
        f"https://github.com/{CARGO_RELEASE_REPO}/releases/download/"
        f"v{v}/cargo-release-v{v}-{triple}.{ext}"
    )


def _safe_member(name: str) -> bool:
    p = PurePosixPath(name)
    return not p.is_absolute() and ".." not in p.parts


def _extract_binary(archive: Path, exe_name: str) -> Result[bytes, ReleaseError]:
    try:
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                for info in zf.infolist():
                    if info.is_dir() or not _safe_member(info.filename):
                        continue
                    if PurePosixPath(info.filename).name == exe_name:
                        return Ok(zf.read(info))
        else:
            with tarfile.open(archive, "r:*") as tf:
                for member in tf.getmembers():
                    if not member.isfile() or not _safe_member(member.name):
                        continue
                    if PurePosixPath(member.name).name != exe_name:
                        continue
                    f = tf.extractfile(member)
                    if f is None:
                        continue
                    with f:
                        return Ok(f.read())
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        return Err(
            ReleaseError(
                kind="download_failed",
                message=f"corrupt cargo-release archive: {e}",
                hint=str(archive),
            )
        )

    return Err(
        ReleaseError(
            kind="download_failed",
            message=f"{exe_name} not found in archive",
            hint=str(archive),
        )
    )


def install_cargo_release(
    version: str,
    *,
    http: HttpClient,
    bin_dir: Path,
    platform_info: PlatformInfo,
    force: bool = False,
) -> Result[InstallResult, ReleaseError]:
    exe_name = platform_info.platform.exe_name("cargo-release")
    dest = bin_dir / exe_name
    if dest.is_file() and not force:
        return Ok(InstallResult(path=dest, version=version, already_installed=True))

    triple = rust_target_triple(platform_info)
    if triple is None:
        return Err(
            ReleaseError(
                kind="unsupported_platform",
                message=f"no prebuilt cargo-release for {platform_info}",
                hint="Run: cargo install cargo-release",
            )
        )

    url = cargo_release_url(version, triple)
    with tempfile.TemporaryDirectory(prefix="shipcrate-") as tmp:
        archive = Path(tmp) / url.rsplit("/", 1)[-1]
        downloaded = http.download(url, archive)
        if isinstance(downloaded, Err):
            return Err(
                ReleaseError(
                    kind="download_failed",
                    message=f"failed to download cargo-release {version}",
                    hint=str(downloaded.error),
                )
            )

        binary = _extract_binary(archive, exe_name)
        if isinstance(binary, Err):
            return binary

    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(binary.value)
        mode = os.stat(dest).st_mode
        os.chmod(dest, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io_error",
                message=f"cannot install cargo-release: {e}",
                hint=str(dest),
            )
        )

    return Ok(InstallResult(path=dest, version=version, already_installed=False))
