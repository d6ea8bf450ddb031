"""Shared data models used across build modules."""

import os
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from deskbuild.domain.constants import ASSET_EXTENSIONS


@dataclass
class PreloadAsset:
    """One preload entry of a package descriptor.

    Descriptors carry either legacy plain strings (``"main.js"``) or
    structured objects (``{"src": ..., "type": ...}``). ``parse`` upgrades
    the legacy shape and keeps structured entries as they were written.
    """

    src: str | None
    type: str | None = None
    data: Any = None

    @classmethod
    def parse(cls, entry: Any) -> 'PreloadAsset':
        if isinstance(entry, str):
            return cls(src=entry, type=cls.infer_type(entry))
        if isinstance(entry, dict):
            return cls(src=entry.get('src'), type=entry.get('type'), data=dict(entry))
        return cls(src=None, data=entry)

    @staticmethod
    def infer_type(src: str) -> str | None:
        ext = os.path.splitext(src.split('?', 1)[0])[1].lower()
        return ASSET_EXTENSIONS.get(ext)

    @property
    def is_legacy(self) -> bool:
        return self.data is None

    def to_dict(self) -> Any:
        if self.is_legacy:
            return {'src': self.src, 'type': self.type}
        if isinstance(self.data, dict):
            return dict(self.data)
        return self.data


@dataclass
class PackageMetadata:
    """A discovered package descriptor with normalized fields."""

    name: str
    repo: str
    type: str
    src: str
    preload: list[PreloadAsset] = field(default_factory=list)
    build: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def short_name(self) -> str:
        return self.name.split('/', 1)[-1]

    @property
    def enabled(self) -> Any:
        return self.data.get('enabled')

    @property
    def autostart(self) -> bool:
        return self.data.get('autostart') is True

    @property
    def class_name(self) -> str | None:
        return self.data.get('className')

    @property
    def conf(self) -> list:
        conf = self.data.get('conf')
        return conf if isinstance(conf, list) else []

    def to_dict(self) -> dict[str, Any]:
        """Manifest shape: raw descriptor plus the normalized fields."""
        result = deepcopy(self.data)
        result.update({
            'type': self.type,
            'path': self.name,
            'build': deepcopy(self.build),
            'repo': self.repo,
            '_src': self.src,
            'preload': [asset.to_dict() for asset in self.preload],
        })
        return result


@dataclass
class ThemeMetadata:
    """Theme collections folded into the client settings."""

    fonts: list[str] = field(default_factory=list)
    icons: list[dict[str, Any]] = field(default_factory=list)
    sounds: list[dict[str, Any]] = field(default_factory=list)
    styles: list[dict[str, Any]] = field(default_factory=list)
