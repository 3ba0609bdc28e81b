from __future__ import annotations

from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.context import build_context
from relkit.cli.commands._helpers import exit_with_code
from relkit.core.errors import ErrorCode
from relkit.core.profile import ReleaseProfile
from relkit.core.result import Err, Ok
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.services.release import ReleaseService
from relkit.services.release_errors import ConfigInvalid


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def release(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to relkit.toml (its directory becomes the project root)."
    ),
    profile: str | None = typer.Option(
        None, "--profile", help="Release profile: single|dual (overrides config)."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Bridge the toolchain environment, build in release mode and package binaries."""
    ctx = build_context(config)

    selected: ReleaseProfile | None = None
    if profile is not None:
        try:
            selected = ReleaseProfile.parse(profile)
        except ValueError as e:
            print_release_error(ConfigInvalid(message=str(e)), ctx.console)
            exit_with_code(int(ErrorCode.FAILURE))

    service = ReleaseService(
        root=ctx.root,
        platform=ctx.platform,
        config=ctx.config,
        console=ctx.console,
    )

    match service.run(selected):
        case Ok(manifest):
            ctx.console.success(
                f"{len(manifest.files)} release file(s) in {service.packager.out_dir}"
            )
        case Err(error):
            print_release_error(error, ctx.console)
            exit_with_code(release_error_exit_code(error))
