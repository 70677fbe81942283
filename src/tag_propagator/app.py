"""Root Typer app — global options and command group registration."""

from __future__ import annotations

from typing import Optional

import typer

from tag_propagator import __version__
from tag_propagator.commands import config_cmd, image, release

app = typer.Typer(
    name="tag-propagator",
    help="Propagate release image tags into a GitOps configuration repository.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    if value:
        print(f"tag-propagator {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """tag-propagator — update per-tier image tags in a GitOps repo."""


# Register command groups
app.add_typer(config_cmd.app, name="config")
app.add_typer(release.app, name="release")
app.add_typer(image.app, name="image")


def main() -> None:
    app()
