# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

import os
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

from .errors import ConfigError

DEFAULT_GITLAB_URL = "https://gitlab.com"

log = logging.getLogger(__name__)


class Config:
    """Handle configuration from environment variables and config files"""

    def __init__(self, config_dir: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        self.config_dir = config_dir or Path.home() / ".config" / "gitlab-browser"
        self.config_file = self.config_dir / "config.json"
        self._environ = os.environ if environ is None else environ
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file and environment variables"""
        config = {
            'gitlab_url': DEFAULT_GITLAB_URL,
            'gitlab_token': None,
            'per_page': 100,
            'request_timeout': 30,
            'refresh_on_back': True,
            'log_file': str(Path.home() / ".cache" / "gitlab-browser" / "gl-browse.log"),
        }

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    file_config = json.load(f)
            except (OSError, ValueError) as e:
                raise ConfigError(f"Could not read {self.config_file}: {e}")
            if not isinstance(file_config, dict):
                raise ConfigError(f"{self.config_file} must contain a JSON object")
            # The token only ever comes from the environment
            file_config.pop('gitlab_token', None)
            config.update(file_config)

        # Environment variables override config file
        token = self._environ.get('GITLAB_PERSONAL_TOKEN') or self._environ.get('GITLAB_TOKEN')
        if token:
            config['gitlab_token'] = token
        if self._environ.get('GITLAB_URL'):
            config['gitlab_url'] = self._environ['GITLAB_URL']

        return config

    def save_config(self, **kwargs):
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config.update(kwargs)

        # Don't save token to file for security
        config_to_save = {k: v for k, v in self._config.items() if k != 'gitlab_token'}

        with open(self.config_file, 'w') as f:
            json.dump(config_to_save, f, indent=2)
        log.info("Saved configuration to %s", self.config_file)

    @property
    def gitlab_url(self) -> str:
        return (self._config.get('gitlab_url') or DEFAULT_GITLAB_URL).rstrip('/')

    @property
    def gitlab_token(self) -> Optional[str]:
        return self._config.get('gitlab_token')

    @property
    def per_page(self) -> int:
        return int(self._config.get('per_page', 100))

    @property
    def request_timeout(self) -> float:
        return float(self._config.get('request_timeout', 30))

    @property
    def refresh_on_back(self) -> bool:
        return bool(self._config.get('refresh_on_back', True))

    @property
    def log_file(self) -> Path:
        return Path(self._config['log_file']).expanduser()

    def validate(self):
        """Raise ConfigError unless the browser can connect with this configuration"""
        if not self.gitlab_token:
            raise ConfigError(
                "GITLAB_PERSONAL_TOKEN not set. Set via environment variable: "
                "export GITLAB_PERSONAL_TOKEN=<token>"
            )
        self.validate_settings()

    def validate_settings(self):
        """Raise ConfigError if the URL or a numeric setting is unusable"""
        if not self.gitlab_url.startswith(("http://", "https://")):
            raise ConfigError(f"GITLAB_URL must be an http(s) URL, got {self.gitlab_url!r}")
        try:
            per_page = self.per_page
            timeout = self.request_timeout
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting in {self.config_file}: {e}")
        if not 1 <= per_page <= 100:
            raise ConfigError("per_page must be between 1 and 100")
        if timeout <= 0:
            raise ConfigError("request_timeout must be positive")
