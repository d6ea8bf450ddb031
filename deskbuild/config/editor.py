"""Writes user overrides into the custom configuration fragment."""

import glob
import json
import os
from typing import Any, Mapping

from deskbuild.config.merge import merge_object
from deskbuild.config.overlays import read_overlay_paths
from deskbuild.config.tree import get_configuration, thaw
from deskbuild.config.tree_reader import ConfigTreeReader
from deskbuild.context import BuildContext
from deskbuild.domain.constants import CONF_DIR, CUSTOM_CONF_FILE
from deskbuild.errors import ParseError, ValidationError


def guess_value(value: Any) -> Any:
    """Interpret a CLI string as a JSON literal when it parses as one."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def build_tree(parts: list[str], value: Any) -> dict[str, Any]:
    """Expand ``['a', 'b', 'c']`` and a value into ``{"a": {"b": {"c": value}}}``."""
    tree: dict[str, Any] = {}
    node = tree
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value
    return tree


def _contains(tree: Any, parts: list[str]) -> bool:
    node = tree
    for part in parts:
        if not isinstance(node, Mapping) or part not in node:
            return False
        node = node[part]
    return True


class ConfigEditor:
    """Edits ``src/conf/900-custom.json`` (or another fragment in ``src/conf``)."""

    def __init__(self, ctx: BuildContext, output_file: str | None = None):
        self.ctx = ctx
        conf_dir = ctx.path(*CONF_DIR)
        self.path = os.path.join(conf_dir, output_file or CUSTOM_CONF_FILE)

    def set(self, key: str | None, value: Any = None, import_file: str | None = None) -> Any:
        """Set ``key`` to ``value``, or to the contents of ``import_file``."""
        key = key or ''
        if import_file:
            imported = self._load(import_file, required=True)
            if not key and not isinstance(imported, dict):
                raise ValidationError(f"{import_file} must contain an object when no --name is given")
            return self._write_tree(build_tree(key.split('.'), imported) if key else imported)

        if value is None:
            raise ValidationError("No value given")
        if not key:
            raise ValidationError("You need to give --name")

        value = guess_value(value)
        self._write_tree(build_tree(key.split('.'), value))
        return value

    def add(self, cfg: Any, key: str, value: Any, entry_key: str | None = None) -> Any:
        """Add a mapping entry (``entry_key``) or append to the list at ``key``."""
        if not key:
            raise ValidationError("You need to give --name")
        value = guess_value(value)

        if entry_key:
            self._write_tree(build_tree(key.split('.') + [entry_key], value))
            return value

        current = thaw(get_configuration(cfg, key, []))
        if not isinstance(current, list):
            raise ValidationError(f"{key} is not a list")
        if value not in current:
            current.append(value)
        self._write_tree(build_tree(key.split('.'), current))
        return current

    def remove(self, cfg: Any, key: str, value: Any = None, entry_key: str | None = None) -> Any:
        """Remove a mapping entry (``entry_key``) or a value from the list at ``key``.

        Raises:
            ValidationError: The entry is also defined by another fragment,
                which would bring it back on the next read.
        """
        if not key:
            raise ValidationError("You need to give --name")

        current = thaw(get_configuration(cfg, key))
        if entry_key:
            if not isinstance(current, dict):
                raise ValidationError(f"{key} is not a mapping")
            return self._remove_entry(cfg, key.split('.'), entry_key, current)

        if not isinstance(current, list):
            raise ValidationError(f"{key} is not a list")
        value = guess_value(value)
        remaining = [v for v in current if v != value]
        self._write_tree(build_tree(key.split('.'), remaining))
        return remaining

    def _remove_entry(self, cfg: Any, parts: list[str], entry_key: str, current: dict[str, Any]) -> dict[str, Any]:
        defined_in = self.defining_fragments(cfg, parts + [entry_key])
        if defined_in:
            raise ValidationError(
                f"{'.'.join(parts)} entry {entry_key!r} is defined in {', '.join(defined_in)}; remove it there"
            )

        conf = self._load(self.path)
        node = conf
        for part in parts:
            node = node.get(part) if isinstance(node, dict) else None
        if isinstance(node, dict) and entry_key in node:
            del node[entry_key]
            self._dump(conf)

        current.pop(entry_key, None)
        return current

    def defining_fragments(self, cfg: Any, parts: list[str]) -> list[str]:
        """Fragments other than the edited one that define the path ``parts``."""
        directories = [self.ctx.path(*CONF_DIR)] + read_overlay_paths(self.ctx, cfg, 'conf')
        found = []
        for directory in directories:
            for path in sorted(glob.glob(os.path.join(glob.escape(directory), '*.json'))):
                if os.path.abspath(path) == os.path.abspath(self.path):
                    continue
                if _contains(ConfigTreeReader.read_fragment(path), parts):
                    found.append(path)
        return found

    def _write_tree(self, tree: dict[str, Any]) -> dict[str, Any]:
        conf = merge_object(self._load(self.path), tree)
        self._dump(conf)
        return tree

    def _dump(self, conf: dict[str, Any]) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(conf, f, indent=2)

    @staticmethod
    def _load(path: str, required: bool = False) -> dict[str, Any]:
        try:
            with open(path, encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            if required:
                raise
            return {}
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed parsing {os.path.basename(path)}: {e}") from e
