"""Frozen configuration tree helpers and dot-path queries."""

from types import MappingProxyType
from typing import Any, Mapping

ConfigurationTree = Mapping[str, Any]

_MISSING = object()


def freeze(value: Any) -> Any:
    """Return a read-only deep view: dicts become mapping proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Return a mutable deep copy of a (possibly frozen) value."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def get_configuration(tree: Any, query: str | None, default: Any = None) -> Any:
    """Look up a dot-path such as ``client.VFS.MaxUploadSize``.

    Numeric segments index into sequences. An empty query returns the tree.
    """
    if not query:
        return tree

    node = tree
    for part in query.split('.'):
        node = _step(node, part)
        if node is _MISSING:
            return default
    return node


def _step(node: Any, part: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(part, _MISSING)
    if isinstance(node, (list, tuple)) and part.isdigit():
        index = int(part)
        return node[index] if index < len(node) else _MISSING
    return _MISSING
