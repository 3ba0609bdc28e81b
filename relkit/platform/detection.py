"""Platform and architecture detection.

Detection is lazy and cached. Besides the OS and CPU enums this module
knows how to spell the host as a target triple and which vendor setup
script matches the host architecture.
"""

from __future__ import annotations

import os as _os
import platform as _platform
import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "Arch",
    "PlatformInfo",
    "detect",
    "detect_arch",
    "detect_platform",
    "is_windows",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_windows(self) -> bool:
        return self == Platform.WINDOWS

    @property
    def exe_suffix(self) -> str:
        """Get executable file suffix for this platform."""
        return ".exe" if self == Platform.WINDOWS else ""

    def exe_name(self, name: str) -> str:
        """Get executable name with platform-appropriate suffix.

        Example: exe_name("speakv") -> "speakv.exe" on Windows, "speakv" elsewhere.
        """
        return f"{name}{self.exe_suffix}"


class Arch(Enum):
    """CPU architecture."""

    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def triple_name(self) -> str:
        """Architecture component of a target triple."""
        return {Arch.X64: "x86_64", Arch.ARM64: "aarch64"}.get(self, "unknown")


_TRIPLE_SUFFIX = {
    Platform.WINDOWS: "pc-windows-msvc",
    Platform.LINUX: "unknown-linux-gnu",
    Platform.MACOS: "apple-darwin",
}

_VCVARS_SCRIPT = {
    Arch.X64: "vcvars64.bat",
    Arch.ARM64: "vcvarsarm64.bat",
}


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Complete platform information.

    Use the `detect()` function to get an instance for the host.
    """

    platform: Platform
    arch: Arch

    @property
    def is_windows(self) -> bool:
        return self.platform == Platform.WINDOWS

    @property
    def target_triple(self) -> str:
        """Host target triple, e.g. ``x86_64-pc-windows-msvc``."""
        suffix = _TRIPLE_SUFFIX.get(self.platform, "unknown-unknown")
        return f"{self.arch.triple_name}-{suffix}"

    @property
    def env_script_name(self) -> str:
        """Architecture-specific toolchain environment script."""
        return _VCVARS_SCRIPT.get(self.arch, "vcvars64.bat")

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    # NOTE: platform.system() may query WMI on Windows, which can hang.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the current CPU architecture (cached)."""
    # NOTE: same WMI concern as detect_platform(); read the env vars instead.
    if detect_platform() == Platform.WINDOWS:
        env_arch = (
            _os.environ.get("PROCESSOR_ARCHITEW6432")
            or _os.environ.get("PROCESSOR_ARCHITECTURE")
            or ""
        )
        machine = env_arch.lower()
    else:
        machine = _platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Detect complete platform information (cached)."""
    return PlatformInfo(platform=detect_platform(), arch=detect_arch())


def is_windows() -> bool:
    """Check if running on Windows."""
    return detect_platform() == Platform.WINDOWS
