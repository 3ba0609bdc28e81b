"""Bridge a vendor toolchain environment into the current process.

Vendor setup scripts (``vcvars64.bat``) only modify the shell that runs
them. To reuse their effect we run the script in a fresh child shell,
have that same shell dump its whole environment table to a private
temporary file, then parse the dump and import every variable here.

Dump lines are ``NAME=value``. Values such as PATH or LIBPATH may contain
further ``=`` characters, so each line is split at the first ``=`` only.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterable, Iterator, MutableMapping
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.detection import PlatformInfo
from relkit.platform.process import Command, run

from .release_errors import BridgeFailure
from .toolchain import ToolchainInstallation

__all__ = [
    "LINKER_VARIABLES",
    "EnvironmentBridge",
    "EnvironmentSnapshot",
    "parse_dump",
    "parse_line",
]

# Variables some runtimes cache at startup; re-asserted after import.
LINKER_VARIABLES = ("PATH", "INCLUDE", "LIB", "LIBPATH")

_CAPTURE_TIMEOUT_SECONDS = 5 * 60.0


@dataclass(frozen=True, slots=True)
class EnvironmentSnapshot:
    """Ordered, immutable name -> value view of a captured environment."""

    variables: tuple[tuple[str, str], ...]

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> EnvironmentSnapshot:
        """Build a snapshot; a repeated name keeps its first position and last value."""
        merged: dict[str, str] = {}
        for name, value in pairs:
            merged[name] = value
        return cls(tuple(merged.items()))

    def __len__(self) -> int:
        return len(self.variables)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self.variables)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self.variables)

    def get(self, name: str) -> str | None:
        """Look up a variable, falling back to a case-insensitive match.

        cmd.exe reports ``Path`` where the rest of the world says ``PATH``.
        """
        folded = None
        for key, value in self.variables:
            if key == name:
                return value
            if folded is None and key.upper() == name.upper():
                folded = value
        return folded

    def as_env(self) -> dict[str, str]:
        """Plain dict, suitable as a subprocess ``env``."""
        return dict(self.variables)


def parse_line(line: str) -> tuple[str, str] | None:
    """Split one dump line at its first ``=``.

    Returns None for lines without ``=`` and for empty names (cmd.exe's
    hidden ``=C:=C:\\`` drive entries).
    """
    name, sep, value = line.rstrip("\r\n").partition("=")
    if not sep or not name:
        return None
    return name, value


def parse_dump(text: str) -> EnvironmentSnapshot:
    pairs: list[tuple[str, str]] = []
    for line in text.split("\n"):
        parsed = parse_line(line)
        if parsed is not None:
            pairs.append(parsed)
    return EnvironmentSnapshot.from_pairs(pairs)


class EnvironmentBridge:
    """Capture a setup script's environment and import it.

    ``environ`` and ``putenv`` default to the live process environment;
    tests pass plain dicts/recorders instead.
    """

    def __init__(
        self,
        *,
        platform: PlatformInfo,
        console: ConsoleProtocol,
        cwd: Path,
        environ: MutableMapping[str, str] | None = None,
        putenv: Callable[[str, str], None] | None = None,
    ) -> None:
        self._platform = platform
        self._console = console
        self._cwd = cwd
        self._environ: MutableMapping[str, str] = os.environ if environ is None else environ
        self._putenv: Callable[[str, str], None] = os.putenv if putenv is None else putenv

    def apply(self, installation: ToolchainInstallation) -> Result[EnvironmentSnapshot, BridgeFailure]:
        """Capture the script's environment and import it into this process."""
        snapshot = self.capture(installation.environment_script_path)
        if isinstance(snapshot, Err):
            return snapshot
        self.import_snapshot(snapshot.value)
        self._console.print(
            f"imported {len(snapshot.value)} variables from {installation.environment_script_path.name}",
            Style.DIM,
        )
        return snapshot

    def capture(self, script: Path) -> Result[EnvironmentSnapshot, BridgeFailure]:
        """Run ``script`` in a fresh shell and parse the environment it leaves behind."""
        fd, dump_name = tempfile.mkstemp(prefix="relkit-env-", suffix=".txt")
        # The child shell writes the file itself; keep no handle open (Windows locking).
        os.close(fd)
        dump = Path(dump_name)
        try:
            return self._capture_into(script, dump)
        finally:
            dump.unlink(missing_ok=True)

    def import_snapshot(self, snapshot: EnvironmentSnapshot) -> None:
        """Write every variable into the live environment.

        Importing the same snapshot twice has the same effect as once.
        """
        for name, value in snapshot.items():
            self._environ[name] = value

        for name in LINKER_VARIABLES:
            value = snapshot.get(name)
            if value is not None:
                self._putenv(name, value)

    def capture_command(self, script: Path, dump: Path) -> Command:
        if self._platform.is_windows:
            # /s strips the outer quotes so the inner ones reach `call` intact.
            return f'cmd.exe /d /s /c "call "{script}" >nul && set > "{dump}""'
        return [
            "/bin/sh",
            "-c",
            '. "$1" >/dev/null && env > "$2"',
            "relkit-env",
            str(script),
            str(dump),
        ]

    @property
    def _dump_encoding(self) -> str:
        # cmd.exe redirects `set` output in the OEM code page.
        return "oem" if self._platform.is_windows else "utf-8"

    def _capture_into(self, script: Path, dump: Path) -> Result[EnvironmentSnapshot, BridgeFailure]:
        result = run(self.capture_command(script, dump), cwd=self._cwd, timeout=_CAPTURE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            detail = result.error.stderr.strip()
            reason = f"environment script failed: {script}"
            if detail:
                reason += f" ({detail})"
            return Err(BridgeFailure(reason=reason, returncode=result.error.returncode))

        try:
            text = dump.read_text(encoding=self._dump_encoding, errors="replace")
        except OSError as e:
            return Err(BridgeFailure(reason=f"cannot read environment dump: {e}"))

        snapshot = parse_dump(text)
        if not snapshot:
            return Err(BridgeFailure(reason=f"environment dump from {script.name} contained no variables"))
        return Ok(snapshot)
