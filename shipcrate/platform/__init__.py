"""Platform abstraction layer."""

from .detection import Arch, Platform, PlatformInfo, detect, rust_target_triple
from .process import ProcessError, run, run_silent

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    "rust_target_triple",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
