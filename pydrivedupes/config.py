"""Configuration management for pydrivedupes.

Settings are read from ``~/.config/pydrivedupes/config``, a dotenv file of
``KEY=VALUE`` lines, and can be overridden with environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://www.googleapis.com/drive/v3"

CONFIG_DIR_ENV = "PYDRIVEDUPES_CONFIG_DIR"
ACCESS_TOKEN_ENV = "GDRIVE_ACCESS_TOKEN"
CREDENTIALS_FILE_KEY = "GDRIVE_CREDENTIALS_FILE"
TOKEN_FILE_KEY = "GDRIVE_TOKEN_FILE"
API_URL_KEY = "GDRIVE_API_URL"


class Config:
    """Resolved configuration values for the Drive client."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file
                (default: ~/.config/pydrivedupes or $PYDRIVEDUPES_CONFIG_DIR)
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            if env_dir:
                config_dir = Path(env_dir)
            else:
                config_dir = Path.home() / ".config" / "pydrivedupes"
        self.config_dir = config_dir
        self.config_file = config_dir / "config"
        self._values: dict[str, str] = {}
        self.reload()

    def reload(self) -> None:
        """Re-read the config file from disk."""
        self._values = self._read_config_file()

    def _read_config_file(self) -> dict[str, str]:
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values

        try:
            parsed = dotenv_values(self.config_file, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read config file {self.config_file}: {e}")
            return values

        # Keys without a value parse as None
        for key, value in parsed.items():
            if value is not None:
                values[key] = value
        return values

    def _get(self, key: str) -> Optional[str]:
        # Environment wins over the config file
        return os.environ.get(key) or self._values.get(key)

    @property
    def access_token(self) -> Optional[str]:
        """Explicit OAuth access token, bypassing the stored credentials."""
        return os.environ.get(ACCESS_TOKEN_ENV)

    @property
    def credentials_file(self) -> Path:
        """Path to the OAuth client secrets JSON downloaded from Google Cloud."""
        value = self._get(CREDENTIALS_FILE_KEY)
        if value:
            return Path(value).expanduser()
        return self.config_dir / "credentials.json"

    @property
    def token_file(self) -> Path:
        """Path where the authorized user token is persisted."""
        value = self._get(TOKEN_FILE_KEY)
        if value:
            return Path(value).expanduser()
        return self.config_dir / "token.json"

    @property
    def api_url(self) -> str:
        """Base URL of the Drive v3 REST API."""
        return self._get(API_URL_KEY) or DEFAULT_API_URL

    def is_configured(self) -> bool:
        """Check whether a token is available without running the OAuth flow."""
        return bool(self.access_token) or self.token_file.exists()

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_file

    def save_credentials_file(self, credentials_file: Path) -> None:
        """Remember the client secrets path in the config file.

        Args:
            credentials_file: Path to the OAuth client secrets JSON
        """
        self._set_value(CREDENTIALS_FILE_KEY, str(Path(credentials_file).resolve()))

    def _set_value(self, key: str, value: str) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.touch(exist_ok=True)
        set_key(self.config_file, key, value, encoding="utf-8")
        self._values[key] = value
        # Config may point at secrets; keep it private
        try:
            self.config_file.chmod(0o600)
        except OSError:
            logger.debug(f"Could not set permissions on {self.config_file}")


config = Config()
