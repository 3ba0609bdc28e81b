from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relkit.core.profile import ArtifactRole


@dataclass(frozen=True, slots=True)
class ConfigInvalid:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolchainNotFound:
    reason: str
    hint: str = "Install Visual Studio (or Build Tools) with the C++ workload"


@dataclass(frozen=True, slots=True)
class ScriptNotFound:
    installation_path: Path
    search_dir: Path
    script: str


@dataclass(frozen=True, slots=True)
class BridgeFailure:
    reason: str
    returncode: int | None = None


@dataclass(frozen=True, slots=True)
class BuildFailure:
    returncode: int
    command: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ArtifactMissing:
    role: ArtifactRole
    path: Path


@dataclass(frozen=True, slots=True)
class PackageFailure:
    reason: str


ReleaseError = (
    ConfigInvalid
    | ToolchainNotFound
    | ScriptNotFound
    | BridgeFailure
    | BuildFailure
    | ArtifactMissing
    | PackageFailure
)
