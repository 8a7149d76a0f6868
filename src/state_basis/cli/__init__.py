"""CLI entry point -- registers all subcommands."""

import typer

from .. import __version__
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="state-basis",
    help="State Basis - temporal correlation auditor for UI state",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"state-basis {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    setup_logging(verbose=verbose, quiet=quiet)


def main() -> None:
    app()


# Import subcommands to register them
from .replay import replay as _replay  # noqa: F401, E402
from .show_config import show_config as _show_config  # noqa: F401, E402
