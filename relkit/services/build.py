"""Release build of the downstream project.

The build tool is a black box: it is run once, synchronously, in the
project root, with the bridged toolchain environment as its environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.core.config import BuildConfig
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.process import run_silent

from .envbridge import EnvironmentSnapshot
from .release_errors import BuildFailure


@dataclass(frozen=True, slots=True)
class BuildResult:
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class BuildOrchestrator:
    def __init__(self, *, config: BuildConfig, console: ConsoleProtocol, cwd: Path) -> None:
        self._config = config
        self._console = console
        self._cwd = cwd

    @property
    def command(self) -> tuple[str, ...]:
        return self._config.command

    def run(self, snapshot: EnvironmentSnapshot) -> Result[BuildResult, BuildFailure]:
        """Run the build; no timeout and no retries."""
        cmd = list(self.command)
        self._console.print(" ".join(cmd), Style.DIM)

        result = run_silent(cmd, cwd=self._cwd, env=snapshot.as_env())
        if isinstance(result, Err):
            if not result.error.launched:
                self._console.print(result.error.stderr, Style.DIM)
                return Err(BuildFailure(returncode=1, command=self.command))
            return Err(BuildFailure(returncode=result.error.returncode, command=self.command))

        return Ok(BuildResult(exit_code=0))
