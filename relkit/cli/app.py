from __future__ import annotations

import typer

from relkit.cli.commands.release import release

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
)

# A single command: `relkit` with no arguments runs the release pipeline.
app.command()(release)


def main() -> None:
    app()
