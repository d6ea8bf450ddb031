"""Package manifest builders for the server and the standalone client."""
import json
import logging
import os
from typing import Any

from deskbuild.context import BuildContext
from deskbuild.domain.constants import (
    CLIENT_MANIFEST_FILE,
    CLIENT_MANIFEST_TEMPLATE,
    PACKAGES_TEMPLATE_TOKEN,
    SERVER_MANIFEST_FILE,
)
from deskbuild.domain.enums import PackageType
from deskbuild.domain.models import PackageMetadata
from deskbuild.errors import NotFoundError

logger = logging.getLogger(__name__)


class ManifestBuilder:
    """Builds package manifests from discovered metadata."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx

    @staticmethod
    def build(packages: dict[str, PackageMetadata]) -> dict[str, dict[str, Any]]:
        return {name: meta.to_dict() for name, meta in packages.items()}

    @staticmethod
    def mutate(manifest: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
        """Server corrections: drop ``build``/``enabled``, mark services singular."""
        result = {}
        for name, entry in manifest.items():
            entry = dict(entry)
            entry.pop('build', None)
            entry.pop('enabled', None)
            if entry.get('type') == PackageType.SERVICE.value:
                entry['singular'] = True
            result[name] = entry
        return result

    def write_server(self, packages: dict[str, PackageMetadata]) -> str:
        """Write ``src/server/packages.json``.

        Raises:
            NotFoundError: The server directory is missing.
        """
        dest = self.ctx.path(*SERVER_MANIFEST_FILE)
        if not os.path.isdir(os.path.dirname(dest)):
            raise NotFoundError(f"Output directory not found: {os.path.dirname(dest)}")

        with open(dest, 'w', encoding='utf-8') as f:
            json.dump(self.mutate(self.build(packages)), f, indent=4)
        logger.debug("Wrote %s", dest)
        return dest

    def write_client(self, packages: dict[str, PackageMetadata]) -> str | None:
        """Write ``dist/packages.js``; only standalone builds ship a client manifest.

        Raises:
            NotFoundError: The manifest template is missing.
        """
        if not self.ctx.standalone:
            return None

        template = self.ctx.path(*CLIENT_MANIFEST_TEMPLATE)
        if not os.path.isfile(template):
            raise NotFoundError(f"Template not found: {template}")
        with open(template, encoding='utf-8') as f:
            content = f.read()

        dest = self.ctx.path(*CLIENT_MANIFEST_FILE)
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        with open(dest, 'w', encoding='utf-8') as f:
            f.write(content.replace(PACKAGES_TEMPLATE_TOKEN, json.dumps(self.build(packages), indent=4), 1))
        logger.debug("Wrote %s", dest)
        return dest
