"""Release pipeline: toolchain -> environment -> build -> artifacts -> package.

Stages run strictly in order and each one gates the next; the first
failure ends the run and is returned to the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from pathlib import Path

from relkit.core.config import Config, read_cargo_package_name
from relkit.core.profile import ReleaseProfile
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.detection import PlatformInfo

from .artifacts import ArtifactResolver
from .build import BuildOrchestrator
from .envbridge import EnvironmentBridge
from .package import ReleaseManifest, ReleasePackager
from .release_errors import ConfigInvalid, PackageFailure, ReleaseError
from .toolchain import ToolchainLocator


class ReleaseService:
    def __init__(
        self,
        *,
        root: Path,
        platform: PlatformInfo,
        config: Config,
        console: ConsoleProtocol,
        environ: MutableMapping[str, str] | None = None,
        putenv: Callable[[str, str], None] | None = None,
    ) -> None:
        self._root = root
        self._platform = platform
        self._config = config
        self._console = console

        self.locator = ToolchainLocator(
            platform=platform, config=config.toolchain, console=console, cwd=root
        )
        self.bridge = EnvironmentBridge(
            platform=platform, console=console, cwd=root, environ=environ, putenv=putenv
        )
        self.orchestrator = BuildOrchestrator(config=config.build, console=console, cwd=root)
        self.resolver = ArtifactResolver(
            output_dir=root / config.build.output_dir,
            platform=platform.platform,
            console=console,
        )
        self.packager = ReleasePackager(out_dir=root / config.release.out_dir, console=console)

    @property
    def target_triple(self) -> str:
        return self._config.release.target or self._platform.target_triple

    def binary_name(self) -> Result[str, ConfigInvalid]:
        """Built binary base name: config first, then Cargo.toml's package name."""
        name = self._config.release.binary or read_cargo_package_name(self._root)
        if name is None:
            return Err(
                ConfigInvalid("release.binary is not set and no package name found in Cargo.toml")
            )
        return Ok(name)

    def run(self, profile: ReleaseProfile | None = None) -> Result[ReleaseManifest, ReleaseError]:
        profile = profile or self._config.release.profile

        binary = self.binary_name()
        if isinstance(binary, Err):
            return binary
        release_name = self._config.release.name or binary.value
        triple = self.target_triple
        self._console.info(f"{release_name} ({profile}) for {triple}")

        self._console.header("Toolchain")
        installation = self.locator.locate()
        if isinstance(installation, Err):
            return installation
        self._console.print(str(installation.value.environment_script_path), Style.DIM)

        self._console.header("Environment")
        snapshot = self.bridge.apply(installation.value)
        if isinstance(snapshot, Err):
            return snapshot

        self._console.header("Build")
        built = self.orchestrator.run(snapshot.value)
        if isinstance(built, Err):
            return built

        self._console.header("Artifacts")
        artifacts = self.resolver.resolve(profile, binary.value)
        if isinstance(artifacts, Err):
            return artifacts

        self._console.header("Package")
        try:
            manifest = self.packager.package(artifacts.value, triple, release_name)
        except OSError as e:
            return Err(PackageFailure(reason=str(e)))
        return Ok(manifest)
