from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.core.config import CONFIG_FILENAME, Config, load_config, load_config_or_default
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import ConsoleProtocol, RichConsole
from relkit.output.errors import print_release_error
from relkit.platform.detection import PlatformInfo, detect
from relkit.services.release_errors import ConfigInvalid


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    platform: PlatformInfo
    config: Config
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    """Resolve the project root and load its config.

    With an explicit config file the project root is the file's directory,
    otherwise the current working directory.
    """
    console = RichConsole()
    if config_path is not None:
        path = config_path.expanduser().resolve()
        root = path.parent
        config_result = load_config(path)
    else:
        root = Path.cwd().resolve()
        config_result = load_config_or_default(root / CONFIG_FILENAME)

    if isinstance(config_result, Err):
        error = config_result.error
        print_release_error(ConfigInvalid(message=error.message, path=error.path), console)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    return CLIContext(
        root=root,
        platform=detect(),
        config=config_result.value,
        console=console,
    )
