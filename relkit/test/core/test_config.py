"""Tests for relkit.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from relkit.core.config import (
    BuildConfig,
    Config,
    ReleaseConfig,
    ToolchainConfig,
    load_config,
    load_config_or_default,
    read_cargo_package_name,
)
from relkit.core.profile import ReleaseProfile
from relkit.core.result import Err, Ok


class TestDefaults:
    def test_release_defaults(self) -> None:
        config = ReleaseConfig()
        assert config.binary is None
        assert config.name is None
        assert config.profile == ReleaseProfile.DUAL
        assert config.target is None
        assert config.out_dir == "release"

    def test_build_defaults(self) -> None:
        config = BuildConfig()
        assert config.command == ("cargo", "build", "--release")
        assert config.output_dir == "target/release"

    def test_toolchain_defaults(self) -> None:
        config = ToolchainConfig()
        assert config.installer is None
        assert config.script_dir == "VC/Auxiliary/Build"
        assert config.script is None

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.release = ReleaseConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_full(self) -> None:
        config = Config.from_dict(
            {
                "release": {
                    "binary": "speakv",
                    "name": "speakv-lite",
                    "profile": "Single",
                    "target": "aarch64-pc-windows-msvc",
                    "out_dir": "dist",
                },
                "build": {
                    "command": ["cargo", "build", "--release", "--locked"],
                    "output_dir": "out/release",
                },
                "toolchain": {"script": "vcvarsall.bat", "script_dir": "VC"},
            }
        )

        assert config.release.binary == "speakv"
        assert config.release.name == "speakv-lite"
        assert config.release.profile == ReleaseProfile.SINGLE
        assert config.release.target == "aarch64-pc-windows-msvc"
        assert config.release.out_dir == "dist"
        assert config.build.command == ("cargo", "build", "--release", "--locked")
        assert config.build.output_dir == "out/release"
        assert config.toolchain.script == "vcvarsall.bat"
        assert config.toolchain.script_dir == "VC"

    def test_unknown_profile(self) -> None:
        with pytest.raises(ValueError, match="unknown release profile"):
            Config.from_dict({"release": {"profile": "triple"}})

    def test_empty_command(self) -> None:
        with pytest.raises(ValueError, match="build.command"):
            Config.from_dict({"build": {"command": []}})

    def test_non_string_command(self) -> None:
        with pytest.raises(ValueError):
            Config.from_dict({"build": {"command": ["cargo", 1]}})


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "relkit.toml"
        path.write_text('[release]\nbinary = "speakv"\nprofile = "dual"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.release.binary == "speakv"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "relkit.toml")

        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "relkit.toml"
        path.write_text("[release\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "relkit.toml"
        path.write_text('[release]\nprofile = "many"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message


class TestLoadConfigOrDefault:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config_or_default(tmp_path / "relkit.toml") == Ok(Config())

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        path = tmp_path / "relkit.toml"
        path.write_text("not toml at all = = =", encoding="utf-8")

        assert isinstance(load_config_or_default(path), Err)


class TestReadCargoPackageName:
    def test_reads_name(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text(
            '[package]\nname = "speakv"\nedition = "2021"\n', encoding="utf-8"
        )
        assert read_cargo_package_name(tmp_path) == "speakv"

    def test_workspace_manifest_has_no_name(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('[workspace]\nmembers = ["a"]\n', encoding="utf-8")
        assert read_cargo_package_name(tmp_path) is None

    def test_no_manifest(self, tmp_path: Path) -> None:
        assert read_cargo_package_name(tmp_path) is None
