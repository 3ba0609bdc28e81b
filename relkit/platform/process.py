"""Subprocess execution with Result-based error handling.

``run`` captures output (queries such as vswhere), ``run_silent`` lets the
child stream to the terminal (the build itself).

Commands are normally argument lists. A plain string is passed through to
the OS untouched; on Windows that is the only way to hand ``cmd.exe`` a
command line with nested quotes.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result

__all__ = ["Command", "ProcessError", "run", "run_silent"]

Command = Sequence[str] | str


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error, or the launch/timeout reason.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def launched(self) -> bool:
        """False when the process could not be started or timed out."""
        return self.returncode >= 0

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _as_tuple(cmd: Command) -> tuple[str, ...]:
    if isinstance(cmd, str):
        return (cmd,)
    return tuple(cmd)


def _as_args(cmd: Command) -> str | list[str]:
    if isinstance(cmd, str):
        return cmd
    return list(cmd)


def run(
    cmd: Command,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            _as_args(cmd),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=_as_tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=_as_tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=_as_tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: Command,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Execute a command without capturing output.

    Output streams to the terminal; nothing is captured on failure either.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            _as_args(cmd),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=_as_tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=_as_tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=_as_tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)
