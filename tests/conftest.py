"""Shared fixtures."""

import pytest

from pydrivedupes.config import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at an empty temporary directory."""
    for name in (
        "GDRIVE_ACCESS_TOKEN",
        "GDRIVE_CREDENTIALS_FILE",
        "GDRIVE_TOKEN_FILE",
        "GDRIVE_API_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "config_dir", tmp_path)
    monkeypatch.setattr(config, "config_file", tmp_path / "config")
    monkeypatch.setattr(config, "_values", {})
    return config
