"""Native toolchain discovery.

Finds the latest Visual Studio installation through ``vswhere.exe`` and
the architecture-specific ``vcvars*.bat`` script beneath it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from relkit.core.config import ToolchainConfig
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.detection import PlatformInfo
from relkit.platform.process import run

from .release_errors import ScriptNotFound, ToolchainNotFound

_VSWHERE_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ToolchainInstallation:
    installation_path: Path
    environment_script_path: Path


def default_installer_path() -> Path:
    """Fixed location of vswhere.exe, shipped with the Visual Studio Installer."""
    program_files = os.environ.get("ProgramFiles(x86)") or r"C:\Program Files (x86)"
    return Path(program_files) / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"


class ToolchainLocator:
    def __init__(
        self,
        *,
        platform: PlatformInfo,
        config: ToolchainConfig,
        console: ConsoleProtocol,
        cwd: Path,
    ) -> None:
        self._platform = platform
        self._config = config
        self._console = console
        self._cwd = cwd

    @property
    def installer_path(self) -> Path:
        if self._config.installer:
            return Path(self._config.installer).expanduser()
        return default_installer_path()

    @property
    def script_name(self) -> str:
        return self._config.script or self._platform.env_script_name

    def locate(self) -> Result[ToolchainInstallation, ToolchainNotFound | ScriptNotFound]:
        installation = self.find_installation()
        if isinstance(installation, Err):
            return installation
        return self.find_script(installation.value)

    def find_installation(self) -> Result[Path, ToolchainNotFound]:
        """Ask the installer for the most recently installed product, any edition."""
        vswhere = self.installer_path
        if not vswhere.is_file():
            return Err(ToolchainNotFound(reason=f"installer query tool not found: {vswhere}"))

        cmd = [str(vswhere), "-latest", "-products", "*", "-property", "installationPath"]
        self._console.print(" ".join(cmd), Style.DIM)
        result = run(cmd, cwd=self._cwd, timeout=_VSWHERE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(ToolchainNotFound(reason=f"{result.error}: {result.error.stderr.strip()}"))

        # One path per line; with -latest there is normally only one.
        lines = [line.strip() for line in result.value.splitlines() if line.strip()]
        if not lines:
            return Err(ToolchainNotFound(reason="no installation reported"))

        installation = Path(lines[0])
        if not installation.is_dir():
            return Err(ToolchainNotFound(reason=f"reported installation does not exist: {installation}"))
        return Ok(installation)

    def find_script(
        self, installation: Path
    ) -> Result[ToolchainInstallation, ScriptNotFound]:
        """Search the fixed script directory for the environment-setup script.

        Candidates are taken in sorted path order and the first one wins.
        """
        search_dir = installation / self._config.script_dir
        script = self.script_name
        if not search_dir.is_dir():
            return Err(ScriptNotFound(installation, search_dir, script))

        candidates = sorted(p for p in search_dir.rglob(script) if p.is_file())
        if not candidates:
            return Err(ScriptNotFound(installation, search_dir, script))

        return Ok(
            ToolchainInstallation(
                installation_path=installation,
                environment_script_path=candidates[0],
            )
        )
