"""Turn a decoded settings document into a ``ConfigurationTree``.

Objects are always walked key by key; every other value becomes a leaf.
Hidden paths are pruned during the walk, so neither the hidden node nor
anything below it reaches the tree.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from config.core.constants import Constants
from services.configuration_document import encode_value
from services.contracts.configuration_models import ConfigurationTree
from services.path_policy import is_hidden
from utils.logging import LogCategory, detailed_log_function

logger = logging.getLogger(__name__)


def join_path(parent_path: str, key: str) -> str:
    if not parent_path:
        return key
    return f"{parent_path}{Constants.PATH_SEPARATOR}{key}"


def split_path(path: str) -> list[str]:
    return path.split(Constants.PATH_SEPARATOR)


def render_value(value: Any) -> Optional[str]:
    """Canonical string form of a decoded value; ``None`` stays absent.

    Strings pass through, numbers keep their literal text, booleans are
    lowercase, and objects or arrays become indented JSON.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return encode_value(value)


def _walk(tree: ConfigurationTree, parent_path: str, node: Any) -> None:
    if isinstance(node, Mapping):
        for key, child in node.items():
            child_path = join_path(parent_path, key)
            if is_hidden(child_path):
                logger.debug("Skipping hidden configuration path %s", child_path)
                continue
            _walk(tree, child_path, child)
        return

    value = render_value(node)
    if value:
        tree.add_item(parent_path, value)


@detailed_log_function(LogCategory.CONFIGURATION)
def build_configuration_tree(document: Mapping[str, Any]) -> ConfigurationTree:
    tree = ConfigurationTree()
    _walk(tree, "", document)
    return tree


def _iter_settings(parent_path: str, node: Any) -> Iterator[Tuple[str, str]]:
    if isinstance(node, Mapping):
        for key, child in node.items():
            yield from _iter_settings(join_path(parent_path, key), child)
    elif isinstance(node, list):
        for index, child in enumerate(node):
            yield from _iter_settings(join_path(parent_path, str(index)), child)
    elif parent_path:
        value = render_value(node)
        if value is not None:
            yield parent_path, value


def flatten_settings(document: Mapping[str, Any]) -> Dict[str, str]:
    """Colon-delimited leaf paths to rendered values; arrays are indexed."""
    return dict(_iter_settings("", document))


__all__ = [
    "build_configuration_tree",
    "flatten_settings",
    "join_path",
    "render_value",
    "split_path",
]
