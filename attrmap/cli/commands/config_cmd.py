"""Config command for viewing and managing attrmap configuration."""

import typer

from ..app import app, console
from ...config import (
    CONFIG_FILE,
    DATA_FORMATS,
    LOG_LEVELS,
    get_config,
    parse_bool,
    reset_config,
)


VALID_KEYS = {
    "coercion.coerce_numbers_to_str",
    "coercion.strict_by_default",
    "cli.log_level",
    "cli.data_format",
}

BOOL_FIELDS = {
    "coerce_numbers_to_str",
    "strict_by_default",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. coercion.strict_by_default, cli.log_level)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify attrmap configuration.

    Examples:
        attrmap config show
        attrmap config set coercion.strict_by_default true
        attrmap config set cli.log_level DEBUG
        attrmap config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] attrmap config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]attrmap Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Coercion[/bold cyan]")
    console.print(f"  coerce_numbers_to_str = {config.coercion.coerce_numbers_to_str}")
    console.print(f"  strict_by_default     = {config.coercion.strict_by_default}")

    console.print()
    console.print("[bold cyan]CLI[/bold cyan]")
    console.print(f"  log_level   = {config.cli.log_level}")
    console.print(f"  data_format = {config.cli.data_format}")

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    config = get_config()
    group, field_name = key.split(".", 1)
    target = config.coercion if group == "coercion" else config.cli

    if field_name in BOOL_FIELDS:
        parsed = parse_bool(value)
        if parsed is None:
            console.print(f"[red]Invalid boolean value:[/red] {value}")
            raise typer.Exit(1)
        setattr(target, field_name, parsed)
    elif field_name == "log_level":
        if value.upper() not in LOG_LEVELS:
            console.print(f"[red]Invalid log level:[/red] {value}")
            raise typer.Exit(1)
        setattr(target, field_name, value.upper())
    else:
        if value.lower() not in DATA_FORMATS:
            console.print(f"[red]Invalid data format:[/red] {value}")
            raise typer.Exit(1)
        setattr(target, field_name, value.lower())

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    if CONFIG_FILE.exists():
        CONFIG_FILE.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {CONFIG_FILE}")
    else:
        console.print("Config already at defaults (no config file exists)")
