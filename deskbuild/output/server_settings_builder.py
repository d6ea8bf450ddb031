"""Builds the server settings document (src/server/settings.json)."""
import json
import logging
import os
from typing import Any

from deskbuild.config.merge import merge_object
from deskbuild.config.tree import get_configuration, thaw
from deskbuild.context import BuildContext
from deskbuild.domain.constants import SERVER_SETTINGS_FILE
from deskbuild.domain.models import PackageMetadata
from deskbuild.errors import NotFoundError

logger = logging.getLogger(__name__)


class ServerSettingsBuilder:
    """Derives server settings from ``server`` plus extension config fragments."""

    def __init__(self, ctx: BuildContext, cfg: Any):
        self.ctx = ctx
        self.cfg = cfg

    def build(self, extensions: dict[str, PackageMetadata]) -> dict[str, Any]:
        """Merge extension ``conf`` fragments in discovery order; later wins."""
        settings = dict(thaw(get_configuration(self.cfg, 'server', {})))

        for extension in extensions.values():
            for fragment in extension.conf:
                path = os.path.join(self.ctx.root, extension.src, fragment)
                try:
                    with open(path, encoding='utf-8') as f:
                        data = json.load(f)
                except (OSError, ValueError) as e:
                    logger.warning("Failed reading %s: %s", os.path.basename(path), e)
                    continue
                if isinstance(data, dict):
                    merge_object(settings, data)
                else:
                    logger.warning("Skipping %s: top level is not an object", os.path.basename(path))

        settings['mimes'] = thaw(get_configuration(self.cfg, 'mime.mapping', {}))
        settings['broadway'] = thaw(get_configuration(self.cfg, 'broadway', {}))
        vfs = settings.get('vfs')
        settings['vfs'] = dict(vfs) if isinstance(vfs, dict) else {}
        settings['vfs']['maxuploadsize'] = get_configuration(self.cfg, 'client.VFS.MaxUploadSize')
        return settings

    def write(self, settings: dict[str, Any]) -> str:
        """Write ``src/server/settings.json``.

        Raises:
            NotFoundError: The server directory is missing.
        """
        dest = self.ctx.path(*SERVER_SETTINGS_FILE)
        if not os.path.isdir(os.path.dirname(dest)):
            raise NotFoundError(f"Output directory not found: {os.path.dirname(dest)}")

        with open(dest, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=4)

        logger.debug("Wrote %s", dest)
        return dest
