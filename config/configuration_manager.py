from __future__ import annotations

import logging
import os  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union  # noqa: E402

from dotenv import dotenv_values  # noqa: E402

from services.configuration_document import load_document  # noqa: E402
from services.configuration_tree_builder import flatten_settings  # noqa: E402

from .core.constants import Constants  # noqa: E402

logger = logging.getLogger(__name__)


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in str(value).split(",") if part.strip()]


def _timeout(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return Constants.DEFAULT_WRITE_TIMEOUT_SECONDS


def _port(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return Constants.DEFAULT_PORT


# Environment variable -> (dotted key, converter)
_ENV_KEYS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    Constants.ENV_KEY: ("env", str),
    Constants.API_KEY_NAME: ("security.api_key", str),
    Constants.ALLOWED_ENVIRONMENTS_KEY: ("settings.allowed_environments", _split_csv),
    Constants.CONTENT_ROOT_KEY: ("settings.content_root", str),
    Constants.SETTINGS_FILE_KEY: ("settings.file_name", str),
    Constants.CHANGE_LOG_FILE_KEY: ("settings.change_log_file", str),
    Constants.WRITE_TIMEOUT_KEY: ("settings.write_timeout_seconds", _timeout),
    Constants.HOST_KEY: ("server.host", str),
    Constants.PORT_KEY: ("server.port", _port),
}

_DEFAULTS: Dict[str, Any] = {
    "env": Constants.DEFAULT_ENV,
    "settings.allowed_environments": list(Constants.DEFAULT_ALLOWED_ENVIRONMENTS),
    "settings.content_root": "",
    "settings.file_name": Constants.DEFAULT_SETTINGS_FILE,
    "settings.change_log_file": Constants.CONFIG_CHANGE_LOG_FILE,
    "settings.write_timeout_seconds": Constants.DEFAULT_WRITE_TIMEOUT_SECONDS,
    "server.host": Constants.DEFAULT_HOST,
    "server.port": Constants.DEFAULT_PORT,
}


class ConfigurationManager:
    """Process configuration under dotted keys, plus the live settings view.

    Priority: initial overrides > environment > .env file > defaults.
    Every raw variable is also kept as ``env.<NAME>``.

    The live settings view is a flattened snapshot of the settings document
    keyed by colon-delimited path. The store calls ``reload()`` after each
    write so later reads see it.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, Any]] = None,
        dotenv_path: Optional[str] = None,
    ) -> None:
        self._data: Dict[str, Any] = dict(_DEFAULTS)
        self._settings_path: Optional[Path] = None
        self._settings: Dict[str, str] = {}
        self._settings_index: Dict[str, str] = {}
        self.reload_count = 0
        self.load_dotenv(dotenv_path)
        self.load_env()
        self._data.update(initial or {})

    # -------------------- Loaders --------------------
    def load_dotenv(self, dotenv_path: Optional[str] = None) -> None:
        """Read ``.env`` and export its values without overriding the process environment."""
        path = Path(dotenv_path) if dotenv_path else Path.cwd() / ".env"
        if not path.is_file():
            return
        try:
            values = dotenv_values(path)
        except Exception as e:
            # Non-fatal: ignore malformed .env
            logger.warning("Ignoring unreadable .env file %s: %s", path, e)
            return
        for key, val in values.items():
            if val is not None:
                os.environ.setdefault(key, val)
                self._ingest(key, val)

    def load_env(self) -> None:
        for key, val in os.environ.items():
            self._ingest(key, val)

    def _ingest(self, key: str, val: str) -> None:
        self._data[f"env.{key}"] = val
        if key in _ENV_KEYS:
            dotted, convert = _ENV_KEYS[key]
            self._data[dotted] = convert(val)

    # -------------------- Accessors --------------------
    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get_str(self, key: str, default: str = "") -> str:
        value = self._data.get(key)
        return default if value is None else str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self._data.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self._data.get(key, default))
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return self._to_bool(value, default)
        return bool(value)

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        value = self._data.get(key)
        if value is None:
            return list(default or [])
        if isinstance(value, str):
            return _split_csv(value)
        return [str(v) for v in value]

    def get_section(self, section: str) -> Dict[str, Any]:
        """Keys under ``section.`` with the prefix removed."""
        prefix = section + "."
        return {k[len(prefix) :]: v for k, v in self._data.items() if k.startswith(prefix)}

    @staticmethod
    def _to_bool(value: str, default: bool) -> bool:
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on", "y"}:
            return True
        if s in {"0", "false", "no", "off", "n"}:
            return False
        return default

    # -------------------- Live settings view --------------------
    @property
    def settings_path(self) -> Optional[Path]:
        return self._settings_path

    def attach_settings_file(self, path: Union[str, Path]) -> None:
        """Bind the settings document and take the first snapshot.

        A document that cannot be read yet leaves the view empty; the store
        reports the problem on its own reads.
        """
        self._settings_path = Path(path)
        try:
            self.reload()
        except Exception as e:
            logger.warning("Settings view starts empty, %s could not be loaded: %s", path, e)
            self._settings, self._settings_index = {}, {}

    def reload(self) -> None:
        """Re-read the settings document; errors propagate to the caller."""
        if self._settings_path is None:
            return
        snapshot = flatten_settings(load_document(self._settings_path))
        self._settings = snapshot
        self._settings_index = {path.lower(): path for path in snapshot}
        self.reload_count += 1
        logger.debug("Reloaded %d settings from %s", len(snapshot), self._settings_path)

    def get_setting(self, path: str, default: Optional[str] = None) -> Optional[str]:
        stored = self._settings_index.get(path.lower())
        return default if stored is None else self._settings[stored]

    def settings_snapshot(self) -> Dict[str, str]:
        return dict(self._settings)


def create_configuration_manager(
    initial: Optional[Mapping[str, Any]] = None,
    dotenv_path: Optional[str] = None,
) -> ConfigurationManager:
    return ConfigurationManager(initial=initial, dotenv_path=dotenv_path)
