import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from config.core.constants import Constants
from utils.logging import LogCategory, get_detailed_logger

logger = logging.getLogger(__name__)


class ConfigurationChangeRecorder:
    """
    Append-only audit trail of configuration changes.
    One line per applied change, written to a plain text file relative to
    the process working directory. Failures are logged and never raised:
    the change has already been persisted by the time it is recorded.
    """

    def __init__(self, log_file: str = Constants.CONFIG_CHANGE_LOG_FILE):
        self.log_file = log_file
        self._audit = get_detailed_logger(__name__, LogCategory.AUDIT)
        logger.info("ConfigurationChangeRecorder initialized (log_file=%s)", log_file)

    @property
    def log_path(self) -> Path:
        path = Path(self.log_file)
        if path.is_absolute():
            return path
        return Path.cwd() / path

    @staticmethod
    def format_entry(path: str, value: str, when: Optional[datetime] = None) -> str:
        """
        Builds one audit line.
        :param path: The configuration path that changed.
        :param value: The value that was written.
        :param when: Timestamp, defaults to the current UTC time.
        """
        moment = when or datetime.now(timezone.utc)
        return (
            f"Configuration changed - Path: {path}, Value: {value}, "
            f"Time: {moment:%Y-%m-%d %H:%M:%S}, Environment: Test"
        )

    def _append(self, line: str) -> None:
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def record(self, path: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._append, self.format_entry(path, value))
        except Exception as e:
            self._audit.exception(
                "Failed to record configuration change", path=path, value=value, exception=e
            )
