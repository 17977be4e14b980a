from __future__ import annotations

import copy
import logging
from typing import Any, Callable, MutableMapping, Optional, Sequence

from requests.structures import CaseInsensitiveDict

from config.core.constants import Constants

logger = logging.getLogger(__name__)


class ConfigurationMutationError(Exception):
    """Raised when a path cannot be written into the working document."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


def _existing_key(mapping: MutableMapping[str, Any], segment: str) -> Optional[str]:
    """Stored spelling of ``segment`` in ``mapping``, compared case-insensitively."""
    lowered = segment.lower()
    for key in mapping:
        if key.lower() == lowered:
            return key
    return None


def set_path(document: MutableMapping[str, Any], segments: Sequence[str], value: str) -> None:
    """Write ``value`` at ``segments`` inside ``document``, in place.

    Missing sections are created. A scalar or array found where a section
    is needed is replaced by an empty section. Existing keys keep their
    stored casing.
    """
    path = Constants.PATH_SEPARATOR.join(segments)
    if not segments:
        raise ConfigurationMutationError(path, "Configuration path has no segments")

    try:
        current = document
        for segment in segments[:-1]:
            key = _existing_key(current, segment)
            if key is None:
                key = segment
                current[key] = CaseInsensitiveDict()
            child = current[key]
            if not isinstance(child, MutableMapping):
                logger.info("Replacing non-section value at '%s' with a section", key)
                child = CaseInsensitiveDict()
                current[key] = child
            current = child

        last = segments[-1]
        current[_existing_key(current, last) or last] = value
    except Exception as exc:
        logger.error("Error writing configuration path %s: %s", path, exc)
        raise ConfigurationMutationError(path, f"Failed to write '{path}': {exc}") from exc


def section_checkpoint(document: MutableMapping[str, Any], segment: str) -> Callable[[], None]:
    """Snapshot the top-level entry a write under ``segment`` touches.

    Calling the returned function puts that entry back as it was, or removes
    it when it did not exist yet.
    """
    key = _existing_key(document, segment)
    if key is None:

        def discard() -> None:
            created = _existing_key(document, segment)
            if created is not None:
                del document[created]

        return discard

    saved = copy.deepcopy(document[key])

    def restore() -> None:
        document[key] = saved

    return restore


__all__ = ["ConfigurationMutationError", "section_checkpoint", "set_path"]
