"""Error codes for CLI exit status.

The release pipeline distinguishes only two outcomes at the shell level:
success, or failure. A failing build is the exception: its own exit code
is propagated unchanged (see ``relkit.output.errors``).
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable.
    """

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower()

    @property
    def is_success(self) -> bool:
        """Check if this code indicates success."""
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        """Check if this code indicates an error."""
        return self != ErrorCode.OK
