"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    PlatformInfo,
    detect,
    is_windows,
)
from .process import (
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    "is_windows",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
