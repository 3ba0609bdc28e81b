"""Tests for relkit.services.envbridge."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.output.console import MockConsole
from relkit.platform.detection import Arch, Platform, PlatformInfo
from relkit.platform.process import ProcessError
from relkit.services.envbridge import (
    LINKER_VARIABLES,
    EnvironmentBridge,
    EnvironmentSnapshot,
    parse_dump,
    parse_line,
)
from relkit.services.release_errors import BridgeFailure
from relkit.services.toolchain import ToolchainInstallation

LINUX = PlatformInfo(platform=Platform.LINUX, arch=Arch.X64)
WINDOWS = PlatformInfo(platform=Platform.WINDOWS, arch=Arch.X64)

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses /bin/sh")


class RecordingPutenv:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def __call__(self, name: str, value: str) -> None:
        self.calls.append((name, value))


def _bridge(
    tmp_path: Path,
    *,
    platform: PlatformInfo = LINUX,
    environ: dict[str, str] | None = None,
    putenv: RecordingPutenv | None = None,
) -> EnvironmentBridge:
    return EnvironmentBridge(
        platform=platform,
        console=MockConsole(),
        cwd=tmp_path,
        environ=environ if environ is not None else {},
        putenv=putenv or RecordingPutenv(),
    )


class TestParseLine:
    def test_splits_on_first_equals_only(self) -> None:
        assert parse_line("NAME=A=B=C") == ("NAME", "A=B=C")

    def test_empty_value(self) -> None:
        assert parse_line("EMPTY=") == ("EMPTY", "")

    def test_strips_line_endings(self) -> None:
        assert parse_line("LIB=C:\\lib;D:\\lib\r\n") == ("LIB", "C:\\lib;D:\\lib")

    def test_keeps_path_separators(self) -> None:
        assert parse_line("PATH=/a:/b:/c") == ("PATH", "/a:/b:/c")

    def test_line_without_equals_is_ignored(self) -> None:
        assert parse_line("not a variable") is None

    def test_hidden_drive_entry_is_ignored(self) -> None:
        assert parse_line("=C:=C:\\work") is None


class TestParseDump:
    def test_preserves_order(self) -> None:
        snapshot = parse_dump("B=2\nA=1\nC=3\n")
        assert list(snapshot) == ["B", "A", "C"]

    def test_crlf_dump(self) -> None:
        snapshot = parse_dump("INCLUDE=C:\\inc\r\nLIB=C:\\lib\r\n")
        assert snapshot.as_env() == {"INCLUDE": "C:\\inc", "LIB": "C:\\lib"}

    def test_skips_garbage_lines(self) -> None:
        snapshot = parse_dump("\n**********\nLIB=x\n")
        assert len(snapshot) == 1

    def test_empty_dump(self) -> None:
        assert len(parse_dump("")) == 0


class TestEnvironmentSnapshot:
    def test_repeated_name_keeps_last_value(self) -> None:
        snapshot = EnvironmentSnapshot.from_pairs([("A", "1"), ("B", "2"), ("A", "3")])
        assert snapshot.variables == (("A", "3"), ("B", "2"))

    def test_get_exact(self) -> None:
        snapshot = EnvironmentSnapshot.from_pairs([("PATH", "x")])
        assert snapshot.get("PATH") == "x"

    def test_get_case_insensitive_fallback(self) -> None:
        snapshot = EnvironmentSnapshot.from_pairs([("Path", "C:\\bin")])
        assert snapshot.get("PATH") == "C:\\bin"

    def test_get_missing(self) -> None:
        assert EnvironmentSnapshot.from_pairs([]).get("LIB") is None

    def test_frozen(self) -> None:
        snapshot = EnvironmentSnapshot.from_pairs([])
        with pytest.raises(AttributeError):
            snapshot.variables = ()  # type: ignore[misc]


class TestImportSnapshot:
    def test_writes_every_variable(self, tmp_path: Path) -> None:
        environ: dict[str, str] = {"KEEP": "me"}
        bridge = _bridge(tmp_path, environ=environ)

        bridge.import_snapshot(parse_dump("LIB=C:\\lib\nVSCMD_VER=17.9\n"))

        assert environ == {"KEEP": "me", "LIB": "C:\\lib", "VSCMD_VER": "17.9"}

    def test_reasserts_linker_variables(self, tmp_path: Path) -> None:
        putenv = RecordingPutenv()
        bridge = _bridge(tmp_path, putenv=putenv)

        bridge.import_snapshot(
            parse_dump("Path=C:\\bin\nINCLUDE=C:\\inc\nLIB=C:\\lib\nLIBPATH=C:\\ref\nOTHER=1\n")
        )

        assert [name for name, _ in putenv.calls] == list(LINKER_VARIABLES)
        assert ("PATH", "C:\\bin") in putenv.calls

    def test_missing_linker_variables_are_not_reasserted(self, tmp_path: Path) -> None:
        putenv = RecordingPutenv()
        bridge = _bridge(tmp_path, putenv=putenv)

        bridge.import_snapshot(parse_dump("LIB=C:\\lib\n"))

        assert putenv.calls == [("LIB", "C:\\lib")]

    def test_applying_twice_is_idempotent(self, tmp_path: Path) -> None:
        environ: dict[str, str] = {"HOME": "/home/dev"}
        bridge = _bridge(tmp_path, environ=environ)
        snapshot = parse_dump("PATH=/opt/bin:/usr/bin\nLIB=a=b\n")

        bridge.import_snapshot(snapshot)
        once = dict(environ)
        bridge.import_snapshot(snapshot)

        assert environ == once


class TestCaptureCommand:
    def test_windows_uses_fresh_cmd(self, tmp_path: Path) -> None:
        bridge = _bridge(tmp_path, platform=WINDOWS)
        cmd = bridge.capture_command(Path("C:/VS/vcvars64.bat"), Path("C:/tmp/env.txt"))

        assert isinstance(cmd, str)
        assert cmd.startswith("cmd.exe /d /s /c ")
        assert "call " in cmd
        assert "&& set >" in cmd

    def test_posix_sources_script(self, tmp_path: Path) -> None:
        bridge = _bridge(tmp_path)
        cmd = bridge.capture_command(Path("/opt/env.sh"), Path("/tmp/env.txt"))

        assert list(cmd)[:2] == ["/bin/sh", "-c"]
        assert list(cmd)[-2:] == ["/opt/env.sh", "/tmp/env.txt"]


class TestCapture:
    def test_child_failure_is_bridge_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.services.envbridge as envbridge

        monkeypatch.setattr(
            envbridge,
            "run",
            lambda cmd, cwd, env=None, timeout=None: Err(ProcessError(("sh",), 2, "", "boom")),
        )

        result = _bridge(tmp_path).capture(tmp_path / "env.sh")

        assert isinstance(result, Err)
        assert isinstance(result.error, BridgeFailure)
        assert result.error.returncode == 2
        assert "boom" in result.error.reason

    def test_empty_dump_is_bridge_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.services.envbridge as envbridge

        monkeypatch.setattr(
            envbridge, "run", lambda cmd, cwd, env=None, timeout=None: Ok("")
        )

        result = _bridge(tmp_path).capture(tmp_path / "env.sh")

        assert isinstance(result, Err)
        assert "no variables" in result.error.reason

    def test_temp_file_removed_after_parse(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.services.envbridge as envbridge

        seen: list[Path] = []

        def fake_run(cmd: list[str], cwd: Path, env: object = None, timeout: object = None) -> Ok[str]:
            dump = Path(cmd[-1])
            dump.write_text("LIB=x\n", encoding="utf-8")
            seen.append(dump)
            return Ok("")

        monkeypatch.setattr(envbridge, "run", fake_run)

        result = _bridge(tmp_path).capture(tmp_path / "env.sh")

        assert isinstance(result, Ok)
        assert seen and not seen[0].exists()

    def test_temp_file_removed_on_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.services.envbridge as envbridge

        seen: list[Path] = []

        def fake_run(cmd: list[str], cwd: Path, env: object = None, timeout: object = None) -> Err[ProcessError]:
            seen.append(Path(cmd[-1]))
            return Err(ProcessError(tuple(cmd), 1, "", ""))

        monkeypatch.setattr(envbridge, "run", fake_run)

        result = _bridge(tmp_path).capture(tmp_path / "env.sh")

        assert isinstance(result, Err)
        assert seen and not seen[0].exists()

    def test_temp_file_names_are_unique(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.services.envbridge as envbridge

        seen: list[str] = []

        def fake_run(cmd: list[str], cwd: Path, env: object = None, timeout: object = None) -> Ok[str]:
            Path(cmd[-1]).write_text("A=1\n", encoding="utf-8")
            seen.append(cmd[-1])
            return Ok("")

        monkeypatch.setattr(envbridge, "run", fake_run)
        bridge = _bridge(tmp_path)
        bridge.capture(tmp_path / "env.sh")
        bridge.capture(tmp_path / "env.sh")

        assert len(set(seen)) == 2


@posix_only
class TestApplyWithShell:
    """Runs a real setup script through /bin/sh."""

    def test_apply_imports_script_effect(self, tmp_path: Path) -> None:
        script = tmp_path / "vcvars64.sh"
        script.write_text(
            "echo 'setting up toolchain'\n"
            "export LIB='/opt/msvc/lib;/opt/sdk/lib'\n"
            "export INCLUDE=/opt/msvc/include\n"
            "export RELKIT_TEST_FLAGS='-DNAME=value -DOTHER=1'\n",
            encoding="utf-8",
        )
        environ: dict[str, str] = {}
        putenv = RecordingPutenv()
        bridge = _bridge(tmp_path, environ=environ, putenv=putenv)

        result = bridge.apply(
            ToolchainInstallation(installation_path=tmp_path, environment_script_path=script)
        )

        assert isinstance(result, Ok)
        assert environ["LIB"] == "/opt/msvc/lib;/opt/sdk/lib"
        assert environ["INCLUDE"] == "/opt/msvc/include"
        assert environ["RELKIT_TEST_FLAGS"] == "-DNAME=value -DOTHER=1"
        assert ("LIB", "/opt/msvc/lib;/opt/sdk/lib") in putenv.calls
        assert os.environ.get("RELKIT_TEST_FLAGS") is None

    def test_failing_script_is_bridge_failure(self, tmp_path: Path) -> None:
        script = tmp_path / "broken.sh"
        script.write_text("exit 3\n", encoding="utf-8")

        result = _bridge(tmp_path).capture(script)

        assert isinstance(result, Err)
        assert result.error.returncode not in (None, 0)
