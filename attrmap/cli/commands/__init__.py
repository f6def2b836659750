"""CLI commands for attrmap."""

from . import map_cmd, validate, config_cmd

__all__ = ["map_cmd", "validate", "config_cmd"]
