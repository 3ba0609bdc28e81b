"""Error presentation utilities.

One diagnostic per failure, naming the stage that failed, and a single
place that maps failures to exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.errors import ErrorCode
from relkit.output.console import Style
from relkit.services.release_errors import (
    ArtifactMissing,
    BridgeFailure,
    BuildFailure,
    ConfigInvalid,
    PackageFailure,
    ReleaseError,
    ScriptNotFound,
    ToolchainNotFound,
)

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error to console with appropriate formatting."""
    match error:
        case ConfigInvalid(message=message, path=path):
            console.error(f"config: {message}")
            if path is not None:
                console.print(f"file: {path}", Style.DIM)
        case ToolchainNotFound(reason=reason, hint=hint):
            console.error(f"toolchain: {reason}")
            console.print(f"hint: {hint}", Style.DIM)
        case ScriptNotFound(search_dir=search_dir, script=script):
            console.error(f"toolchain: {script} not found under {search_dir}")
        case BridgeFailure(reason=reason):
            console.error(f"environment: {reason}")
        case BuildFailure(returncode=rc):
            console.error(f"build failed (exit {rc})")
        case ArtifactMissing(role=role, path=path):
            console.error(f"artifacts: {role} binary not found: {path}")
        case PackageFailure(reason=reason):
            console.error(f"package: {reason}")


def release_error_exit_code(error: ReleaseError) -> int:
    """Exit code for a release error.

    A failed build propagates the build tool's own exit code; every other
    failure exits with 1.
    """
    match error:
        case BuildFailure(returncode=rc) if rc > 0:
            return rc
        case _:
            return int(ErrorCode.FAILURE)
