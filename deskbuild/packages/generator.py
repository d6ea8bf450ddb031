"""Scaffolds a new package from ``src/templates/package/<type>``."""
import glob
import logging
import os
import re
import shutil

from deskbuild.context import BuildContext
from deskbuild.domain.constants import PACKAGE_NAME_TOKEN, PACKAGE_TEMPLATES_DIR, PACKAGES_DIR
from deskbuild.domain.enums import PackageType
from deskbuild.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r'[^A-Za-z0-9._]')


class PackageGenerator:
    """Copies a package template and stamps the package name into it."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx

    def generate(self, name: str | None, package_type: str | None = None, dest: str | None = None) -> str:
        """Create ``<dest>/<repo>/<package>`` and return its path."""
        package_type = package_type or PackageType.APPLICATION.value
        parts = (name or '').split('/')
        if len(parts) != 2 or not all(parts):
            raise ValidationError("Invalid package name or type (expected repository/name)")

        repo, package = (_UNSAFE_RE.sub('', p) for p in parts)
        if not repo or not package:
            raise ValidationError(f"Invalid package name: {name}")

        target = os.path.join(dest or self.ctx.path(*PACKAGES_DIR), repo, package)
        if os.path.exists(target):
            raise ValidationError(f"{target} already exists")

        template = self.ctx.path(*PACKAGE_TEMPLATES_DIR, package_type)
        if not os.path.isdir(template):
            raise NotFoundError(f"No such package type: {package_type}")

        shutil.copytree(template, target)
        for path in glob.glob(os.path.join(glob.escape(target), '*.*')):
            if os.path.isfile(path):
                self._stamp(path, package)

        logger.info("Package %s generated", target)
        return target

    @staticmethod
    def _stamp(path: str, package: str) -> None:
        with open(path, encoding='utf-8') as f:
            content = f.read()
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content.replace(PACKAGE_NAME_TOKEN, package))
