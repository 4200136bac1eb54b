"""Host OS/CPU as the pieces of a Rust target triple.

Prebuilt cargo-release archives are named after the target triple they
were built for, so that is the only question shipcrate asks the host.
"""

from __future__ import annotations

import os
import platform as _platform
import sys
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

__all__ = [
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    "detect_arch",
    "detect_platform",
    "rust_target_triple",
]


class Platform(Enum):
    """Operating system; the value is the triple's vendor-os-abi tail."""

    LINUX = "unknown-linux-gnu"
    MACOS = "apple-darwin"
    WINDOWS = "pc-windows-msvc"
    UNKNOWN = ""

    def __str__(self) -> str:
        return self.name.lower()

    def exe_name(self, name: str) -> str:
        return f"{name}.exe" if self is Platform.WINDOWS else name


class Arch(Enum):
    """CPU; the value is the triple's first component."""

    X64 = "x86_64"
    ARM64 = "aarch64"
    UNKNOWN = ""

    def __str__(self) -> str:
        return self.name.lower()


# cargo-release publishes no Windows ARM build.
_UNPUBLISHED = {(Platform.WINDOWS, Arch.ARM64)}


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    platform: Platform
    arch: Arch

    @property
    def target_triple(self) -> str | None:
        if not self.platform.value or not self.arch.value:
            return None
        if (self.platform, self.arch) in _UNPUBLISHED:
            return None
        return f"{self.arch.value}-{self.platform.value}"

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


def rust_target_triple(info: PlatformInfo) -> str | None:
    return info.target_triple


_SYS_PREFIXES: tuple[tuple[tuple[str, ...], Platform], ...] = (
    (("linux",), Platform.LINUX),
    (("darwin",), Platform.MACOS),
    (("win32", "cygwin", "msys"), Platform.WINDOWS),
)

_MACHINES = {
    "x86_64": Arch.X64,
    "amd64": Arch.X64,
    "aarch64": Arch.ARM64,
    "arm64": Arch.ARM64,
}


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    name = sys.platform.lower()
    for prefixes, found in _SYS_PREFIXES:
        if name.startswith(prefixes):
            return found
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    if detect_platform() is Platform.WINDOWS:
        # platform.machine() reports the emulated CPU under WOW64.
        machine = os.environ.get("PROCESSOR_ARCHITEW6432") or os.environ.get(
            "PROCESSOR_ARCHITECTURE", ""
        )
    else:
        machine = _platform.machine()
    return _MACHINES.get(machine.lower(), Arch.UNKNOWN)


def detect() -> PlatformInfo:
    return PlatformInfo(platform=detect_platform(), arch=detect_arch())
