"""Locate the binaries a release is made of.

Names follow the build tool's convention inside its output directory:
``<name><ext>`` for the client and ``<name>-server<ext>`` for the server.
Only existence is checked; nothing is created or modified here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from relkit.core.profile import ArtifactRole, ReleaseProfile
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol
from relkit.platform.detection import Platform

from .release_errors import ArtifactMissing


def _empty_paths() -> Mapping[ArtifactRole, Path]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ArtifactSet:
    paths: Mapping[ArtifactRole, Path] = field(default_factory=_empty_paths)
    skipped: tuple[ArtifactRole, ...] = ()

    @property
    def roles(self) -> tuple[ArtifactRole, ...]:
        return tuple(self.paths)


def artifact_name(role: ArtifactRole, binary_base_name: str, platform: Platform) -> str:
    if role == ArtifactRole.SERVER:
        return platform.exe_name(f"{binary_base_name}-server")
    return platform.exe_name(binary_base_name)


class ArtifactResolver:
    def __init__(self, *, output_dir: Path, platform: Platform, console: ConsoleProtocol) -> None:
        self._output_dir = output_dir
        self._platform = platform
        self._console = console

    def expected_path(self, role: ArtifactRole, binary_base_name: str) -> Path:
        return (self._output_dir / artifact_name(role, binary_base_name, self._platform)).absolute()

    def resolve(
        self, profile: ReleaseProfile, binary_base_name: str
    ) -> Result[ArtifactSet, ArtifactMissing]:
        """Resolve the artifacts for ``profile``.

        The client is mandatory. Under DUAL a missing server is reported
        once and skipped.
        """
        paths: dict[ArtifactRole, Path] = {}
        skipped: list[ArtifactRole] = []

        for role in profile.roles:
            path = self.expected_path(role, binary_base_name)
            if path.is_file():
                paths[role] = path
            elif role == ArtifactRole.CLIENT:
                return Err(ArtifactMissing(role=role, path=path))
            else:
                self._console.warning(f"{role} binary not found, skipping: {path}")
                skipped.append(role)

        return Ok(ArtifactSet(paths=MappingProxyType(paths), skipped=tuple(skipped)))
