"""Builds the client settings script (dist/settings.js)."""
import json
import logging
import os
from typing import Any

from deskbuild.config.tree import get_configuration, thaw
from deskbuild.context import BuildContext
from deskbuild.domain.constants import (
    BROADWAY_PRELOAD,
    CLIENT_SETTINGS_FILE,
    CLIENT_SETTINGS_TEMPLATE,
    CONFIG_TEMPLATE_TOKEN,
)
from deskbuild.domain.models import PackageMetadata, ThemeMetadata
from deskbuild.errors import NotFoundError

logger = logging.getLogger(__name__)


def _title_map(entries: list[dict]) -> dict[str, Any]:
    return {e.get('name'): e.get('title') for e in entries}


def _preload_list(preloads: Any) -> list:
    if isinstance(preloads, dict):
        return list(preloads.values())
    if isinstance(preloads, list):
        return list(preloads)
    return []


class ClientSettingsBuilder:
    """Derives client-facing settings from the ``client`` section."""

    def __init__(self, ctx: BuildContext, cfg: Any):
        self.ctx = ctx
        self.cfg = cfg

    def build(self, themes: ThemeMetadata, autostart: dict[str, PackageMetadata]) -> dict[str, Any]:
        settings = dict(thaw(get_configuration(self.cfg, 'client', {})))

        preloads = _preload_list(settings.get('Preloads'))
        if not isinstance(settings.get('AutoStart'), list):
            settings['AutoStart'] = []

        if self.ctx.standalone:
            settings['Connection'] = dict(settings.get('Connection') or {}, Type='standalone')

        broadway = thaw(get_configuration(self.cfg, 'broadway', {}))
        settings['Debug'] = self.ctx.debug
        settings['Broadway'] = broadway
        if isinstance(broadway, dict) and broadway.get('enabled'):
            preloads.append(dict(BROADWAY_PRELOAD))

        fonts = dict(settings.get('Fonts') or {})
        fonts['list'] = list(themes.fonts) + list(fonts.get('list') or [])
        settings['Fonts'] = fonts
        settings['Styles'] = themes.styles
        settings['Sounds'] = _title_map(themes.sounds)
        settings['Icons'] = _title_map(themes.icons)

        settings['AutoStart'] = settings['AutoStart'] + [p.class_name for p in autostart.values()]
        settings['MIME'] = thaw(get_configuration(self.cfg, 'mime', {}))
        settings['Preloads'] = preloads
        return settings

    def write(self, settings: dict[str, Any]) -> str:
        """Render the settings template into ``dist/settings.js``.

        Raises:
            NotFoundError: The settings template is missing.
        """
        template = self.ctx.path(*CLIENT_SETTINGS_TEMPLATE)
        if not os.path.isfile(template):
            raise NotFoundError(f"Template not found: {template}")

        with open(template, encoding='utf-8') as f:
            content = f.read()

        dest = self.ctx.path(*CLIENT_SETTINGS_FILE)
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        with open(dest, 'w', encoding='utf-8') as f:
            f.write(content.replace(CONFIG_TEMPLATE_TOKEN, json.dumps(settings, indent=4), 1))

        logger.debug("Wrote %s", dest)
        return dest
