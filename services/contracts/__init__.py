"""Configuration contract models package."""

from .configuration_models import (
    BulkUpdateResult,
    ConfigurationItem,
    ConfigurationTree,
    ConfigurationUpdate,
    FailedUpdate,
)
from .result import ConfigurationErrorCode, Failure, Result, Success

__all__ = [
    "BulkUpdateResult",
    "ConfigurationErrorCode",
    "ConfigurationItem",
    "ConfigurationTree",
    "ConfigurationUpdate",
    "FailedUpdate",
    "Failure",
    "Result",
    "Success",
]
