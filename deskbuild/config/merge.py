"""Recursive deep merge of configuration mappings."""

from typing import Any


def merge_object(into: dict[str, Any], from_: dict[str, Any]) -> dict[str, Any]:
    """Merge ``from_`` into ``into`` and return ``into``.

    Plain dicts merge recursively; any other value (scalar, list, None)
    replaces the existing entry wholesale. Later calls win, so merge the
    lowest-priority mapping first. No cycle detection.
    """
    for key, value in from_.items():
        if isinstance(value, dict):
            target = into.get(key)
            if not isinstance(target, dict):
                target = {}
            into[key] = merge_object(target, value)
        else:
            into[key] = value
    return into
