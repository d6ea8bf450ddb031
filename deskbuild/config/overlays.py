"""Overlay declarations: external trees layered on top of the installation."""

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from deskbuild.context import BuildContext


@dataclass
class Overlay:
    """One overlay entry from the ``overlays`` configuration key."""

    name: str
    root: str
    conf: list[str] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)


def read_overlays(ctx: BuildContext, cfg: Any) -> list[Overlay]:
    """Parse the overlay mapping in declaration order.

    An entry is either a root path string or an object with optional
    ``path``, ``conf`` and ``packages`` keys. Relative paths resolve against
    the overlay root, which itself defaults to the installation root.
    The legacy ``build.overlays`` location is read when ``overlays`` is unset.
    """
    declared = cfg.get('overlays') if isinstance(cfg, Mapping) else None
    if not declared:
        build = cfg.get('build') if isinstance(cfg, Mapping) else None
        declared = build.get('overlays') if isinstance(build, Mapping) else None
    if not isinstance(declared, Mapping):
        return []

    overlays = []
    for name, entry in declared.items():
        if isinstance(entry, str):
            entry = {'path': entry}
        if not isinstance(entry, Mapping):
            continue

        root = os.path.normpath(os.path.join(ctx.root, entry.get('path') or '.'))
        overlays.append(Overlay(
            name=name,
            root=root,
            conf=_resolve_list(root, entry.get('conf')),
            packages=_resolve_list(root, entry.get('packages')),
        ))
    return overlays


def read_overlay_paths(ctx: BuildContext, cfg: Any, key: str) -> list[str]:
    """All ``conf`` or ``packages`` paths across overlays, in order."""
    paths: list[str] = []
    for overlay in read_overlays(ctx, cfg):
        paths.extend(getattr(overlay, key))
    return paths


def _resolve_list(root: str, entries: Any) -> list[str]:
    if not isinstance(entries, (list, tuple)):
        return []
    return [os.path.normpath(os.path.join(root, e)) for e in entries if isinstance(e, str)]
