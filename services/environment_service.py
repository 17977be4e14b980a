from __future__ import annotations

import os
from pathlib import Path

from config.configuration_manager import ConfigurationManager
from config.core.constants import Constants


class EnvironmentService:
    """Decides whether configuration access is allowed and where the settings live."""

    def __init__(self, config: ConfigurationManager) -> None:
        self._config = config

    @property
    def environment(self) -> str:
        return self._config.get_str("env", Constants.DEFAULT_ENV)

    def allowed_environments(self) -> list[str]:
        return [
            name.lower()
            for name in self._config.get_list(
                "settings.allowed_environments", list(Constants.DEFAULT_ALLOWED_ENVIRONMENTS)
            )
        ]

    def is_allowed_environment(self) -> bool:
        return self.environment.strip().lower() in self.allowed_environments()

    def resolve_settings_file_path(self) -> Path:
        file_name = Path(
            self._config.get_str("settings.file_name", Constants.DEFAULT_SETTINGS_FILE)
        )
        if file_name.is_absolute():
            return file_name
        content_root = self._config.get_str("settings.content_root", "") or os.getcwd()
        return Path(content_root) / file_name
