"""Core CLI app definition and global state."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="attrmap",
    help="Map raw data files onto typed attribute schemas.",
    no_args_is_help=True,
)

console = Console()

# Global state for JSON mode (set by callback)
_json_mode = False


def get_json_mode() -> bool:
    """Get current JSON mode state."""
    return _json_mode


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        print(f"attrmap {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    """Route library logging through rich, at the configured level."""
    from ..config import get_config

    level = "DEBUG" if verbose else get_config().cli.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output machine-readable JSON instead of human-friendly text",
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log resolution details to stderr"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
):
    """attrmap: map raw keyed data onto typed, validated attributes.

    Use --json for machine-readable output suitable for scripting.
    """
    global _json_mode
    _json_mode = json_output
    _setup_logging(verbose)


# Import commands to register them with the app
from .commands import map_cmd, validate, config_cmd  # noqa: E402, F401
