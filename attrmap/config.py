"""Configuration management for attrmap.

Two config groups:
- coercion: how the default coercion provider and attribute() behave
- cli: logging level and data file format for the command line

Config resolution order (highest priority first):
1. Programmatic (AttrmapConfig constructed in code, installed with configure())
2. Environment variables (ATTRMAP_*, .env files included)
3. Config file (~/.config/attrmap/config.json, managed by `attrmap config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "attrmap"
CONFIG_FILE = CONFIG_DIR / "config.json"

DATA_FORMATS = ("auto", "json", "yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class CoercionConfig:
    """Coercion behaviour.

    - coerce_numbers_to_str: let str attributes accept numbers (1 → "1")
    - strict_by_default: strict flag for attribute() calls that don't set one
    """

    coerce_numbers_to_str: bool = True
    strict_by_default: bool = False


@dataclass
class CliConfig:
    """Command line settings."""

    log_level: str = "WARNING"
    data_format: str = "auto"  # auto = pick by file extension


@dataclass
class AttrmapConfig:
    """Top-level attrmap configuration.

    Examples:
        # Package use, no files needed
        configure(AttrmapConfig(coercion=CoercionConfig(strict_by_default=True)))

        # CLI use, loads ~/.config/attrmap/config.json + env vars
        config = AttrmapConfig.load()
    """

    coercion: CoercionConfig = field(default_factory=CoercionConfig)
    cli: CliConfig = field(default_factory=CliConfig)

    @classmethod
    def load(cls) -> "AttrmapConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: config file
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: env var overrides
        _ensure_dotenv()
        if val := os.environ.get("ATTRMAP_COERCE_NUMBERS_TO_STR"):
            parsed = parse_bool(val)
            if parsed is None:
                logger.warning("Invalid ATTRMAP_COERCE_NUMBERS_TO_STR=%r, ignoring", val)
            else:
                config.coercion.coerce_numbers_to_str = parsed
        if val := os.environ.get("ATTRMAP_STRICT_BY_DEFAULT"):
            parsed = parse_bool(val)
            if parsed is None:
                logger.warning("Invalid ATTRMAP_STRICT_BY_DEFAULT=%r, ignoring", val)
            else:
                config.coercion.strict_by_default = parsed
        if val := os.environ.get("ATTRMAP_LOG_LEVEL"):
            if val.upper() in LOG_LEVELS:
                config.cli.log_level = val.upper()
            else:
                logger.warning("Invalid ATTRMAP_LOG_LEVEL=%r, ignoring", val)
        if val := os.environ.get("ATTRMAP_DATA_FORMAT"):
            if val.lower() in DATA_FORMATS:
                config.cli.data_format = val.lower()
            else:
                logger.warning("Invalid ATTRMAP_DATA_FORMAT=%r, ignoring", val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/attrmap/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "coercion": asdict(self.coercion),
            "cli": asdict(self.cli),
        }


# =============================================================================
# Helpers
# =============================================================================

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def parse_bool(value: str) -> bool | None:
    """Parse a config/env boolean string, or None if unrecognized."""
    lowered = value.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    return None


def _apply_dict(config: AttrmapConfig, data: dict) -> None:
    """Apply a dict of values onto an AttrmapConfig."""
    if "coercion" in data and isinstance(data["coercion"], dict):
        for k, v in data["coercion"].items():
            if isinstance(v, str):
                v = parse_bool(v)
            if hasattr(config.coercion, k) and v is not None:
                setattr(config.coercion, k, bool(v))
    if "cli" in data and isinstance(data["cli"], dict):
        cli = data["cli"]
        if "log_level" in cli:
            level = str(cli["log_level"]).upper()
            if level in LOG_LEVELS:
                config.cli.log_level = level
            else:
                logger.warning(
                    "Invalid cli.log_level=%r in config file, ignoring", cli["log_level"]
                )
        if "data_format" in cli:
            data_format = str(cli["data_format"]).lower()
            if data_format in DATA_FORMATS:
                config.cli.data_format = data_format
            else:
                logger.warning(
                    "Invalid cli.data_format=%r in config file, ignoring", cli["data_format"]
                )


_dotenv_loaded = False


def _ensure_dotenv() -> None:
    """Load .env file into os.environ if not already loaded."""
    global _dotenv_loaded
    if not _dotenv_loaded:
        _dotenv_loaded = True
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)


# =============================================================================
# Global config singleton
# =============================================================================

_config: AttrmapConfig | None = None


def get_config() -> AttrmapConfig:
    """Get the global AttrmapConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = AttrmapConfig.load()
    return _config


def configure(config: AttrmapConfig) -> None:
    """Set the global AttrmapConfig programmatically.

    The default coercion provider is rebuilt from the new config on next use.
    Attributes already declared keep the strict flag they were built with.
    """
    global _config
    _config = config
    _reset_provider()


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
    _reset_provider()


def _reset_provider() -> None:
    from .core.coercion import set_coercion_provider

    set_coercion_provider(None)
