"""Success/failure envelope returned by every configuration store operation.

``Success`` always carries data and ``Failure`` always carries a non-blank
message, so the two legal states are separate types instead of one class
with nullable fields. Business-rule outcomes (environment gate, path policy,
not found, parse errors) travel as ``Failure`` values and are never raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")
U = TypeVar("U")


class ConfigurationErrorCode(str, Enum):
    ENVIRONMENT_NOT_ALLOWED = "ENVIRONMENT_NOT_ALLOWED"
    PATH_EMPTY = "PATH_EMPTY"
    VALUE_MISSING = "VALUE_MISSING"
    UPDATES_EMPTY = "UPDATES_EMPTY"
    PATH_HIDDEN = "PATH_HIDDEN"
    PATH_RESTRICTED = "PATH_RESTRICTED"
    NOT_FOUND = "NOT_FOUND"
    NULL_VALUE = "NULL_VALUE"
    DOCUMENT_MISSING = "DOCUMENT_MISSING"
    PARSE_ERROR = "PARSE_ERROR"
    ENCODE_ERROR = "ENCODE_ERROR"
    MUTATION_ERROR = "MUTATION_ERROR"
    WRITE_TIMEOUT = "WRITE_TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    return data


class Success(BaseModel, Generic[T]):
    """Successful outcome carrying non-null data."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_success: Literal[True] = True
    data: T

    @field_validator("data")
    @classmethod
    def _validate_data(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("a successful result cannot carry null data")
        return value

    def map(self, mapper: Callable[[T], U]) -> "Success[U]":
        return Success(data=mapper(self.data))

    def match(self, on_success: Callable[[T], Any], on_failure: Callable[[str], Any]) -> Any:
        return on_success(self.data)

    def to_response(self) -> Dict[str, Any]:
        return {"isSuccess": True, "data": _dump(self.data), "error": None, "errorCode": None}

    def __str__(self) -> str:
        return f"Success: {self.data}"


class Failure(BaseModel):
    """Failed outcome carrying a human-readable message and an error code."""

    model_config = ConfigDict(frozen=True)

    is_success: Literal[False] = False
    error: str = Field(..., min_length=1)
    code: Optional[ConfigurationErrorCode] = None

    @field_validator("error")
    @classmethod
    def _validate_error(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("a failed result requires an error message")
        return value

    def map(self, mapper: Callable[[Any], Any]) -> "Failure":
        return self

    def match(self, on_success: Callable[[Any], Any], on_failure: Callable[[str], Any]) -> Any:
        return on_failure(self.error)

    def to_response(self) -> Dict[str, Any]:
        return {
            "isSuccess": False,
            "data": None,
            "error": self.error,
            "errorCode": self.code.value if self.code else None,
        }

    def __str__(self) -> str:
        return f"Failure: {self.error}"


Result = Union[Success[T], Failure]


__all__ = ["ConfigurationErrorCode", "Failure", "Result", "Success"]
