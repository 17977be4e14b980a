"""Load, decode, encode and persist the JSON settings document.

Decoded documents use a small tagged set of Python values:

* ``None``, ``bool``, ``str``
* :class:`IntegerLiteral` and :class:`NumberLiteral` for numbers (both
  remember their source text)
* ``CaseInsensitiveDict`` for objects
* ``list`` for arrays
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Mapping, Union

from requests.structures import CaseInsensitiveDict

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, "CaseInsensitiveDict[Any]", List[Any]]


class SettingsDocumentError(Exception):
    """Base class for settings document failures."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = Path(path)


class SettingsDocumentMissingError(SettingsDocumentError):
    pass


class SettingsDocumentParseError(SettingsDocumentError):
    pass


class SettingsDocumentEncodeError(SettingsDocumentError):
    """The document holds a value that has no JSON text, e.g. an overflowed number."""


class IntegerLiteral(int):
    """Integer that keeps the exact text it was decoded from (``-0`` stays ``-0``)."""

    def __new__(cls, literal: str) -> "IntegerLiteral":
        number = super().__new__(cls, literal)
        number.literal = str(literal)
        return number

    def __str__(self) -> str:
        return self.literal


class NumberLiteral(float):
    """Float that keeps the exact text it was decoded from."""

    def __new__(cls, literal: str) -> "NumberLiteral":
        number = super().__new__(cls, literal)
        number.literal = str(literal)
        return number

    def __str__(self) -> str:
        return self.literal


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unsupported JSON constant: {name}")


def _object_from_pairs(pairs: List[tuple]) -> "CaseInsensitiveDict[Any]":
    return CaseInsensitiveDict(pairs)


def decode_document(text: str, path: Union[str, Path] = "<memory>") -> "CaseInsensitiveDict[Any]":
    """Decode a settings document; the root must be a JSON object."""
    try:
        document = json.loads(
            text,
            object_pairs_hook=_object_from_pairs,
            parse_float=NumberLiteral,
            parse_int=IntegerLiteral,
            parse_constant=_reject_constant,
        )
    except ValueError as e:
        raise SettingsDocumentParseError(f"Invalid JSON in settings document: {e}", path) from e
    if not isinstance(document, CaseInsensitiveDict):
        raise SettingsDocumentParseError("Settings document root must be a JSON object", path)
    return document


def load_document(path: Union[str, Path]) -> "CaseInsensitiveDict[Any]":
    settings_path = Path(path)
    if not settings_path.is_file():
        raise SettingsDocumentMissingError(f"Settings file not found: {settings_path}", settings_path)
    text = settings_path.read_text(encoding="utf-8-sig")
    return decode_document(text, settings_path)


def _encode_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value.items())
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_value(value: Any) -> str:
    """Indented JSON text for any decoded value, used for display only.

    A number too large for a float shows as ``Infinity`` here; scalar leaves
    still render from their literal text.
    """
    return json.dumps(value, indent=2, ensure_ascii=False, default=_encode_default)


def encode_document(path: Union[str, Path], document: Mapping[str, Any]) -> str:
    """Strict JSON text for persisting; raises rather than emit a non-JSON token."""
    try:
        return json.dumps(
            document, indent=2, ensure_ascii=False, allow_nan=False, default=_encode_default
        ) + "\n"
    except (TypeError, ValueError) as e:
        raise SettingsDocumentEncodeError(f"Settings document cannot be written as JSON: {e}", path) from e


def persist_document(path: Union[str, Path], document: Mapping[str, Any]) -> None:
    """Rewrite the whole document through a sibling temp file and an atomic replace.

    The text is produced before the temp file exists, so an encoding failure
    leaves the settings file untouched.
    """
    settings_path = Path(path)
    text = encode_document(settings_path, document)
    tmp_file_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(settings_path.parent),
            prefix=f".{settings_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp_file:
            tmp_file_path = tmp_file.name
            tmp_file.write(text)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_file_path, settings_path)
        tmp_file_path = None
        logger.debug("Persisted settings document %s (%d bytes)", settings_path, len(text))
    finally:
        if tmp_file_path is not None and os.path.exists(tmp_file_path):
            os.unlink(tmp_file_path)


__all__ = [
    "IntegerLiteral",
    "JsonValue",
    "NumberLiteral",
    "SettingsDocumentEncodeError",
    "SettingsDocumentError",
    "SettingsDocumentMissingError",
    "SettingsDocumentParseError",
    "decode_document",
    "encode_document",
    "encode_value",
    "load_document",
    "persist_document",
]
