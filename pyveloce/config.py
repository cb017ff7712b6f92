"""Configuration management for PyVeloce."""

import os
from pathlib import Path
from typing import Optional

DEFAULT_API_VERSION = "58.0"
DEFAULT_SOURCE_PATH = "source"
DEFAULT_FOLDER_NAME = "velo_product_models"


class Config:
    """Resolves settings from the environment and the user config file.

    Environment variables take precedence over values stored in
    ``~/.config/pyveloce/config``.
    """

    ENV_INSTANCE_URL = "VELOCE_INSTANCE_URL"
    ENV_ACCESS_TOKEN = "VELOCE_ACCESS_TOKEN"
    ENV_API_VERSION = "VELOCE_API_VERSION"
    ENV_SOURCE_PATH = "VELOCE_SOURCE_PATH"

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".config" / "pyveloce"

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_dir / "config"

    def _read_file(self) -> dict[str, str]:
        path = self.get_config_path()
        if not path.exists():
            return {}

        values: dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()
        return values

    def _write_file(self, values: dict[str, str]) -> None:
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        content = "".join(f"{key}={value}\n" for key, value in sorted(values.items()))
        path.write_text(content, encoding="utf-8")
        # Token is a secret
        path.chmod(0o600)

    def _get(self, key: str) -> Optional[str]:
        return os.environ.get(key) or self._read_file().get(key)

    @property
    def instance_url(self) -> Optional[str]:
        """Base URL of the org, e.g. ``https://example.my.salesforce.com``."""
        url = self._get(self.ENV_INSTANCE_URL)
        return url.rstrip("/") if url else None

    @property
    def access_token(self) -> Optional[str]:
        """OAuth access token (session id)."""
        return self._get(self.ENV_ACCESS_TOKEN)

    @property
    def api_version(self) -> str:
        """REST API version."""
        return self._get(self.ENV_API_VERSION) or DEFAULT_API_VERSION

    @property
    def source_path(self) -> Path:
        """Default local source directory."""
        return Path(self._get(self.ENV_SOURCE_PATH) or DEFAULT_SOURCE_PATH)

    def is_configured(self) -> bool:
        """Check whether both the instance URL and access token are known."""
        return bool(self.instance_url and self.access_token)

    def save_credentials(self, instance_url: str, access_token: str) -> None:
        """Store credentials in the config file.

        Args:
            instance_url: Org base URL
            access_token: OAuth access token
        """
        values = self._read_file()
        values[self.ENV_INSTANCE_URL] = instance_url.rstrip("/")
        values[self.ENV_ACCESS_TOKEN] = access_token
        self._write_file(values)


config = Config()
