"""Reads the layered configuration tree.

Fragments are merged from ``src/conf`` first and then from each overlay's
fragment directories. Within a directory, fragments merge in lexicographic
filename order, so ``900-custom.json`` overrides ``100-base.json``.

Placeholders resolve in two phases: each overlay is resolved against its own
root before it is merged (so ``%ROOT%`` in an overlay names that overlay's
location), then the complete tree gets a final global pass.
"""
import glob
import json
import logging
import os
from copy import deepcopy
from typing import Any

from deskbuild.config.merge import merge_object
from deskbuild.config.overlays import Overlay, read_overlays
from deskbuild.config.placeholders import PlaceholderResolver
from deskbuild.config.tree import ConfigurationTree, freeze
from deskbuild.context import BuildContext
from deskbuild.domain.constants import CONF_DIR

logger = logging.getLogger(__name__)


class ConfigTreeReader:
    """Builds one frozen configuration snapshot per invocation."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx
        self.resolver = PlaceholderResolver(ctx.environ, ctx.platform)

    @property
    def base_dir(self) -> str:
        return self.ctx.path(*CONF_DIR)

    def read(self) -> ConfigurationTree:
        """Read, merge, resolve, and freeze the configuration tree.

        Raises:
            FileNotFoundError: The base configuration directory is missing.
            ParseError: Placeholder substitution broke the JSON document.
        """
        if not os.path.isdir(self.base_dir):
            raise FileNotFoundError(f"Configuration directory not found: {self.base_dir}")

        tree = self.read_directory(self.base_dir)

        for overlay in read_overlays(self.ctx, tree):
            overlay_tree = self._read_overlay(overlay)
            lookup = merge_object(deepcopy(tree), self.resolver.substitute_root(overlay_tree, overlay.root))
            resolved = self.resolver.resolve(overlay_tree, overlay.root, lookup=lookup)
            merge_object(tree, resolved)

        return freeze(self.resolver.resolve(tree, self.ctx.root))

    def read_directory(self, directory: str, into: dict[str, Any] | None = None) -> dict[str, Any]:
        """Merge every ``*.json`` fragment of ``directory`` into ``into``."""
        tree = {} if into is None else into
        for path in sorted(glob.glob(os.path.join(glob.escape(directory), '*.json'))):
            fragment = self.read_fragment(path)
            if fragment is not None:
                merge_object(tree, fragment)
        return tree

    def _read_overlay(self, overlay: Overlay) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        for directory in overlay.conf:
            if not os.path.isdir(directory):
                logger.warning("Overlay %s: configuration directory %s not found", overlay.name, directory)
                continue
            self.read_directory(directory, tree)
        return tree

    @staticmethod
    def read_fragment(path: str) -> dict[str, Any] | None:
        try:
            with open(path, encoding='utf-8') as f:
                fragment = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Failed parsing %s: %s", os.path.basename(path), e)
            return None

        if not isinstance(fragment, dict):
            logger.warning("Skipping %s: top level is not an object", os.path.basename(path))
            return None
        return fragment
