"""Typed configuration loading and access.

Configuration lives in an optional ``relkit.toml`` at the project root.
Every key has a default, so a project without the file still builds.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .profile import ReleaseProfile
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "ToolchainConfig",
    "CONFIG_FILENAME",
    "load_config",
    "load_config_or_default",
    "read_cargo_package_name",
]

CONFIG_FILENAME = "relkit.toml"

DEFAULT_BUILD_COMMAND = ("cargo", "build", "--release")
DEFAULT_BUILD_OUTPUT_DIR = "target/release"
DEFAULT_RELEASE_DIR = "release"
DEFAULT_SCRIPT_DIR = "VC/Auxiliary/Build"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """What gets released and where.

    ``binary`` is the base name of the built executable; ``name`` is the
    base name used in release filenames and defaults to ``binary``.
    ``target`` defaults to the host triple when unset.
    """

    binary: str | None = None
    name: str | None = None
    profile: ReleaseProfile = ReleaseProfile.DUAL
    target: str | None = None
    out_dir: str = DEFAULT_RELEASE_DIR


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Downstream build invocation."""

    command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
    output_dir: str = DEFAULT_BUILD_OUTPUT_DIR


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Overrides for toolchain discovery (None = platform default)."""

    installer: str | None = None
    script_dir: str = DEFAULT_SCRIPT_DIR
    script: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: On an unknown profile or an empty build command.
        """
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}
        toolchain: StrDict = get_table(data, "toolchain") or {}

        profile_raw = get_str(release, "profile")
        profile = ReleaseProfile.parse(profile_raw) if profile_raw else ReleaseProfile.DUAL

        command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
        if "command" in build:
            items = get_str_list(build, "command")
            if not items:
                raise ValueError("build.command must be a non-empty list of strings")
            command = tuple(items)

        return cls(
            release=ReleaseConfig(
                binary=get_str(release, "binary"),
                name=get_str(release, "name"),
                profile=profile,
                target=get_str(release, "target"),
                out_dir=get_str(release, "out_dir") or DEFAULT_RELEASE_DIR,
            ),
            build=BuildConfig(
                command=command,
                output_dir=get_str(build, "output_dir") or DEFAULT_BUILD_OUTPUT_DIR,
            ),
            toolchain=ToolchainConfig(
                installer=get_str(toolchain, "installer"),
                script_dir=get_str(toolchain, "script_dir") or DEFAULT_SCRIPT_DIR,
                script=get_str(toolchain, "script"),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relkit.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, otherwise return the defaults.

    A file that exists but does not parse is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def read_cargo_package_name(root: Path) -> str | None:
    """Read ``[package].name`` from the project's Cargo.toml, if any."""
    manifest = root / "Cargo.toml"
    if not manifest.is_file():
        return None
    result = _parse_toml(manifest)
    if isinstance(result, Err):
        return None
    package = get_table(result.value, "package") or {}
    return get_str(package, "name")
