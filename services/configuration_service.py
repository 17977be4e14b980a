"""Configuration store: read and write the settings document.

Reads and writes are only served in an allowed environment. Reads skip
hidden paths and writes refuse restricted ones. Every write runs inside the
shared :class:`WriteSection` as one load, mutate, persist, reload and record
cycle, so two writers never interleave on the file. Once a write has been
accepted it runs to completion even if the caller goes away.

All operations return ``Success``/``Failure``; nothing raised inside the
store crosses its boundary.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from config.configuration_manager import ConfigurationManager
from services.configuration_change_recorder import ConfigurationChangeRecorder
from services.configuration_document import (
    SettingsDocumentEncodeError,
    SettingsDocumentMissingError,
    SettingsDocumentParseError,
    load_document,
    persist_document,
)
from services.configuration_mutator import (
    ConfigurationMutationError,
    section_checkpoint,
    set_path,
)
from services.configuration_tree_builder import (
    build_configuration_tree,
    render_value,
    split_path,
)
from services.contracts.configuration_models import (
    BulkUpdateResult,
    ConfigurationItem,
    ConfigurationTree,
    ConfigurationUpdate,
    FailedUpdate,
)
from services.contracts.result import ConfigurationErrorCode, Failure, Result, Success
from services.environment_service import EnvironmentService
from services.path_policy import is_hidden, is_restricted
from services.write_section import WriteSection, WriteSectionTimeoutError
from utils.logging import LogCategory, get_detailed_logger

VIEW_NOT_ALLOWED = "Configuration viewing is only available in the development environment"
UPDATE_NOT_ALLOWED = "Configuration updates are only allowed in the development environment"
PATH_EMPTY = "Configuration path cannot be empty"
VALUE_MISSING = "Configuration value is required"
UPDATES_EMPTY = "Configuration update list cannot be empty"
PARSE_ERROR = "Configuration file contains invalid JSON"
ENCODE_ERROR = "Configuration document cannot be written as valid JSON"


def _path_is_blank(path: Optional[str]) -> bool:
    return path is None or not path.strip()


def _value_is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class ConfigurationService:
    def __init__(
        self,
        environment: EnvironmentService,
        write_section: WriteSection,
        recorder: ConfigurationChangeRecorder,
        live_settings: ConfigurationManager,
    ) -> None:
        self._environment = environment
        self._write_section = write_section
        self._recorder = recorder
        self._live_settings = live_settings
        self._logger = get_detailed_logger(__name__, LogCategory.CONFIGURATION)
        self.settings_file_path: Path = environment.resolve_settings_file_path()

    # -------------------- Reads --------------------
    async def get_all(self) -> Result[ConfigurationTree]:
        """Every visible value as a tree."""
        if not self._environment.is_allowed_environment():
            self._logger.warning(
                "Configuration view attempted outside allowed environment",
                environment=self._environment.environment,
            )
            return Failure(error=VIEW_NOT_ALLOWED, code=ConfigurationErrorCode.ENVIRONMENT_NOT_ALLOWED)

        try:
            document = await self._load()
            return Success(data=build_configuration_tree(document))
        except Exception as exc:
            return self._failure_from_exception(exc, "read")

    async def get_by_path(self, path: str) -> Result[ConfigurationItem]:
        """One value; sections and arrays come back as indented JSON."""
        if not self._environment.is_allowed_environment():
            self._logger.warning(
                "Configuration view attempted outside allowed environment",
                environment=self._environment.environment,
                path=path,
            )
            return Failure(error=VIEW_NOT_ALLOWED, code=ConfigurationErrorCode.ENVIRONMENT_NOT_ALLOWED)

        if _path_is_blank(path):
            return Failure(error=PATH_EMPTY, code=ConfigurationErrorCode.PATH_EMPTY)

        if is_hidden(path):
            self._logger.warning("Hidden configuration view attempted", path=path)
            return Failure(
                error=f"Configuration at '{path}' cannot be viewed",
                code=ConfigurationErrorCode.PATH_HIDDEN,
            )

        try:
            document = await self._load()
        except Exception as exc:
            return self._failure_from_exception(exc, "read", path=path)

        segments = split_path(path)
        current: Any = document
        for segment in segments:
            if not isinstance(current, Mapping) or segment not in current:
                return Failure(
                    error=f"Configuration not found at '{path}'",
                    code=ConfigurationErrorCode.NOT_FOUND,
                )
            current = current[segment]

        value = render_value(current)
        if value is None:
            return Failure(
                error=f"Configuration value at '{path}' is null",
                code=ConfigurationErrorCode.NULL_VALUE,
            )
        return Success(data=ConfigurationItem(path=path, key=segments[-1], value=value))

    # -------------------- Writes --------------------
    async def update(self, path: str, value: Optional[str]) -> Result[ConfigurationItem]:
        if _path_is_blank(path):
            return Failure(error=PATH_EMPTY, code=ConfigurationErrorCode.PATH_EMPTY)

        if not self._environment.is_allowed_environment():
            self._logger.warning(
                "Configuration update attempted outside allowed environment",
                environment=self._environment.environment,
                path=path,
            )
            return Failure(error=UPDATE_NOT_ALLOWED, code=ConfigurationErrorCode.ENVIRONMENT_NOT_ALLOWED)

        if value is None:
            return Failure(error=VALUE_MISSING, code=ConfigurationErrorCode.VALUE_MISSING)

        if is_restricted(path):
            self._logger.warning("Restricted configuration update attempted", path=path)
            return Failure(
                error=f"Updating {path} is not allowed",
                code=ConfigurationErrorCode.PATH_RESTRICTED,
            )

        return await asyncio.shield(self._apply_update(path, value))

    async def bulk_update(
        self, updates: Optional[Iterable[ConfigurationUpdate]]
    ) -> Result[BulkUpdateResult]:
        """Apply a batch under one lock, one load and at most one persist.

        Individual items that fail validation, policy or mutation are
        reported in the result; the batch itself still succeeds.
        """
        batch = list(updates or [])
        if not batch:
            return Failure(error=UPDATES_EMPTY, code=ConfigurationErrorCode.UPDATES_EMPTY)

        if not self._environment.is_allowed_environment():
            self._logger.warning(
                "Bulk configuration update attempted outside allowed environment",
                environment=self._environment.environment,
                count=len(batch),
            )
            return Failure(error=UPDATE_NOT_ALLOWED, code=ConfigurationErrorCode.ENVIRONMENT_NOT_ALLOWED)

        return await asyncio.shield(self._apply_bulk_update(batch))

    async def _apply_update(self, path: str, value: str) -> Result[ConfigurationItem]:
        try:
            async with self._write_section.hold():
                document = await self._load()
                set_path(document, split_path(path), value)
                await self._persist_and_reload(document)
                await self._recorder.record(path, value)
        except Exception as exc:
            return self._failure_from_exception(exc, "update", path=path)

        self._logger.info("Configuration updated", path=path)
        return Success(data=ConfigurationItem(path=path, key=split_path(path)[-1], value=value))

    async def _apply_bulk_update(self, batch: List[ConfigurationUpdate]) -> Result[BulkUpdateResult]:
        successful: List[ConfigurationItem] = []
        failed: List[FailedUpdate] = []

        try:
            async with self._write_section.hold():
                document = await self._load()

                for update in batch:
                    outcome = self._apply_batch_item(document, update)
                    if isinstance(outcome, FailedUpdate):
                        failed.append(outcome)
                        continue
                    successful.append(outcome)

                if successful:
                    await self._persist_and_reload(document)
                    for item in successful:
                        await self._recorder.record(item.path, item.value or "")
        except Exception as exc:
            return self._failure_from_exception(exc, "bulk update")

        self._logger.info(
            "Bulk configuration update finished",
            succeeded=len(successful),
            failed=len(failed),
        )
        return Success(
            data=BulkUpdateResult(successful_updates=tuple(successful), failed_updates=tuple(failed))
        )

    def _apply_batch_item(
        self, document: Any, update: ConfigurationUpdate
    ) -> Union[FailedUpdate, ConfigurationItem]:
        """Apply one item to the shared working document.

        A failing item rolls back the top-level entry it touched, so it never
        leaves a half-written section behind.
        """
        if _path_is_blank(update.path):
            return FailedUpdate(
                update=update, error_message=PATH_EMPTY, error_code=ConfigurationErrorCode.PATH_EMPTY
            )
        if _value_is_blank(update.value):
            return FailedUpdate(
                update=update,
                error_message=VALUE_MISSING,
                error_code=ConfigurationErrorCode.VALUE_MISSING,
            )
        if is_restricted(update.path):
            self._logger.warning("Restricted configuration update attempted", path=update.path)
            return FailedUpdate(
                update=update,
                error_message=f"Updating {update.path} is not allowed",
                error_code=ConfigurationErrorCode.PATH_RESTRICTED,
            )

        segments = split_path(update.path)
        rollback = section_checkpoint(document, segments[0])
        try:
            set_path(document, segments, update.value)
        except ConfigurationMutationError as exc:
            rollback()
            self._logger.error("Configuration update failed", path=update.path, exception=exc)
            return FailedUpdate(
                update=update,
                error_message=f"Update failed: {exc}",
                error_code=ConfigurationErrorCode.MUTATION_ERROR,
            )
        return ConfigurationItem(path=update.path, key=segments[-1], value=update.value)

    # -------------------- Helpers --------------------
    async def _load(self) -> Any:
        return await asyncio.to_thread(load_document, self.settings_file_path)

    async def _persist_and_reload(self, document: Any) -> None:
        await asyncio.to_thread(persist_document, self.settings_file_path, document)
        await asyncio.to_thread(self._live_settings.reload)

    def _failure_from_exception(
        self, exc: Exception, operation: str, path: Optional[str] = None
    ) -> Failure:
        if isinstance(exc, SettingsDocumentMissingError):
            self._logger.error("Settings file not found", settings_file=str(exc.path))
            return Failure(
                error=f"Settings file not found: {exc.path.name}",
                code=ConfigurationErrorCode.DOCUMENT_MISSING,
            )
        if isinstance(exc, SettingsDocumentParseError):
            self._logger.error("Settings file is not valid JSON", exception=exc)
            return Failure(error=PARSE_ERROR, code=ConfigurationErrorCode.PARSE_ERROR)
        if isinstance(exc, SettingsDocumentEncodeError):
            self._logger.error("Settings document cannot be written", path=path, exception=exc)
            return Failure(error=ENCODE_ERROR, code=ConfigurationErrorCode.ENCODE_ERROR)
        if isinstance(exc, ConfigurationMutationError):
            self._logger.error("Configuration update failed", path=path, exception=exc)
            return Failure(
                error=f"Failed to update configuration: {exc}",
                code=ConfigurationErrorCode.MUTATION_ERROR,
            )
        if isinstance(exc, WriteSectionTimeoutError):
            self._logger.error("Configuration write lock timeout", path=path, exception=exc)
            return Failure(error=str(exc), code=ConfigurationErrorCode.WRITE_TIMEOUT)

        self._logger.exception(f"Configuration {operation} failed", path=path, exception=exc)
        return Failure(
            error=f"Configuration {operation} failed: {exc}",
            code=ConfigurationErrorCode.INTERNAL_ERROR,
        )
