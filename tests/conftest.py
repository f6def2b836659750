"""Shared fixtures: keep every test away from the user's real config."""

import pytest

from attrmap import config as config_module
from attrmap.cli.commands import config_cmd
from attrmap.core.coercion import set_coercion_provider


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and clear ATTRMAP_* env vars."""
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config_cmd, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config_module, "_dotenv_loaded", True)
    for name in (
        "ATTRMAP_COERCE_NUMBERS_TO_STR",
        "ATTRMAP_STRICT_BY_DEFAULT",
        "ATTRMAP_LOG_LEVEL",
        "ATTRMAP_DATA_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)

    config_module.reset_config()
    yield config_file
    config_module.reset_config()
    set_coercion_provider(None)
