from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from config.core.constants import Constants

from .result import ConfigurationErrorCode


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConfigurationItem(_WireModel):
    """One node of the configuration tree.

    ``key`` is the last path segment and ``path`` the colon-delimited path
    from the root. Only leaves carry a value; sections carry children.
    """

    path: str
    key: str
    value: Optional[str] = None
    children: Dict[str, "ConfigurationItem"] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_leaf_or_section(self) -> "ConfigurationItem":
        if self.children and self.value is not None:
            raise ValueError(f"section '{self.path}' cannot carry a value")
        return self

    @computed_field(alias="isLeaf")  # type: ignore[prop-decorator]
    @property
    def is_leaf(self) -> bool:
        return not self.children


class ConfigurationTree(_WireModel):
    """Root mapping from top-level key to configuration item."""

    items: Dict[str, ConfigurationItem] = Field(default_factory=dict)

    def add_item(self, path: str, value: str) -> ConfigurationItem:
        """Insert ``value`` at ``path``, creating intermediate sections.

        Existing nodes are reused. When a leaf and a section share a path
        (a key such as ``"A:B"`` next to ``A -> B -> ...``) the section wins
        whatever the insertion order, so the node never carries both.
        """
        *parents, last = path.split(Constants.PATH_SEPARATOR)
        current = self.items
        current_path = ""

        for segment in parents:
            current_path = self._child_path(current_path, segment)
            node = current.get(segment)
            if node is None:
                node = ConfigurationItem(key=segment, path=current_path)
                current[segment] = node
            node.value = None
            current = node.children

        current_path = self._child_path(current_path, last)
        node = current.get(last)
        if node is None:
            node = ConfigurationItem(key=last, path=current_path, value=value)
            current[last] = node
        elif not node.children:
            node.value = value
        return node

    @staticmethod
    def _child_path(parent_path: str, segment: str) -> str:
        if not parent_path:
            return segment
        return f"{parent_path}{Constants.PATH_SEPARATOR}{segment}"

    def find(self, path: str) -> Optional[ConfigurationItem]:
        current = self.items
        node: Optional[ConfigurationItem] = None
        for segment in path.split(Constants.PATH_SEPARATOR):
            node = current.get(segment)
            if node is None:
                return None
            current = node.children
        return node


class ConfigurationUpdate(_WireModel):
    """Requested change; both fields are checked by the store before use."""

    path: Optional[str] = None
    value: Optional[str] = None


class FailedUpdate(_WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    update: ConfigurationUpdate
    error_message: str = Field(..., min_length=1)
    error_code: ConfigurationErrorCode


class BulkUpdateResult(_WireModel):
    """Per-item outcome of a bulk update, in input order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    successful_updates: Tuple[ConfigurationItem, ...] = ()
    failed_updates: Tuple[FailedUpdate, ...] = ()

    @computed_field(alias="totalCount")  # type: ignore[prop-decorator]
    @property
    def total_count(self) -> int:
        return len(self.successful_updates) + len(self.failed_updates)

    @computed_field(alias="successCount")  # type: ignore[prop-decorator]
    @property
    def success_count(self) -> int:
        return len(self.successful_updates)

    @computed_field(alias="failureCount")  # type: ignore[prop-decorator]
    @property
    def failure_count(self) -> int:
        return len(self.failed_updates)
