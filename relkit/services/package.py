"""Copy resolved artifacts into stable, triple-qualified release files.

Release filenames are a pure function of (role, base name, target
triple), so every run overwrites the previous release instead of adding
to it:

    speakv-x86_64-pc-windows-msvc.exe
    speakv-server-x86_64-pc-windows-msvc.exe
"""

from __future__ import annotations

import hashlib
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from relkit.core.profile import ArtifactRole
from relkit.output.console import ConsoleProtocol

from .artifacts import ArtifactSet


@dataclass(frozen=True, slots=True)
class ReleaseManifest:
    target_triple: str
    binary_base_name: str
    files: Mapping[ArtifactRole, Path]

    @property
    def filenames(self) -> list[str]:
        return sorted(p.name for p in self.files.values())


def exe_suffix_for_triple(target_triple: str) -> str:
    return ".exe" if "-windows" in target_triple else ""


def release_filename(role: ArtifactRole, binary_base_name: str, target_triple: str) -> str:
    stem = binary_base_name if role == ArtifactRole.CLIENT else f"{binary_base_name}-{role}"
    return f"{stem}-{target_triple}{exe_suffix_for_triple(target_triple)}"


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


class ReleasePackager:
    def __init__(self, *, out_dir: Path, console: ConsoleProtocol) -> None:
        self._out_dir = out_dir
        self._console = console

    @property
    def out_dir(self) -> Path:
        return self._out_dir

    def package(
        self, artifacts: ArtifactSet, target_triple: str, binary_base_name: str
    ) -> ReleaseManifest:
        """Copy each present artifact to its release name, overwriting.

        Raises:
            OSError: If the release directory or a copy cannot be written.
        """
        self._out_dir.mkdir(parents=True, exist_ok=True)

        files: dict[ArtifactRole, Path] = {}
        for role, src in artifacts.paths.items():
            dest = self._out_dir / release_filename(role, binary_base_name, target_triple)
            shutil.copy2(src, dest)
            files[role] = dest
            size = dest.stat().st_size
            self._console.success(f"{dest} ({size} bytes, sha256 {_sha256_file(dest)})")

        return ReleaseManifest(
            target_triple=target_triple,
            binary_base_name=binary_base_name,
            files=MappingProxyType(files),
        )
