"""Theme discovery for fonts, icons, sounds, and styles."""
import glob
import json
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from deskbuild.config.tree import get_configuration
from deskbuild.context import BuildContext
from deskbuild.domain.constants import FONT_STYLE_FILE, METADATA_FILE, THEMES_DIR
from deskbuild.domain.enums import ThemeCategory
from deskbuild.domain.models import ThemeMetadata
from deskbuild.errors import ParseError


class ThemeDiscovery:
    """Reads theme metadata filtered by the ``themes.<category>`` allow-lists.

    Icons, sounds and styles are only included when listed. Fonts are
    discovered by their ``style.css`` and are filtered only when a
    ``themes.fonts`` list is configured.
    """

    def __init__(self, ctx: BuildContext, cfg: Any):
        self.ctx = ctx
        self.cfg = cfg
        self.base_path = ctx.path(*THEMES_DIR)

    def get_metadata(self) -> ThemeMetadata:
        categories = list(ThemeCategory)
        with ThreadPoolExecutor(max_workers=len(categories)) as pool:
            results = list(pool.map(self.read_category, categories))
        return ThemeMetadata(**{c.value: r for c, r in zip(categories, results)})

    def read_category(self, category: ThemeCategory) -> list:
        allowed = get_configuration(self.cfg, f'themes.{category.value}', None)
        if category is ThemeCategory.FONTS:
            return self._read_fonts(allowed)
        return self._read_metadata(category.value, list(allowed or []))

    def _read_fonts(self, allowed: Any) -> list[str]:
        names = [os.path.basename(os.path.dirname(p)) for p in self._glob('fonts', FONT_STYLE_FILE)]
        if allowed is None:
            return names
        return [n for n in names if n in allowed]

    def _read_metadata(self, category: str, allowed: list[str]) -> list[dict]:
        entries = []
        for path in self._glob(category, METADATA_FILE):
            if os.path.basename(os.path.dirname(path)) not in allowed:
                continue
            with open(path, encoding='utf-8') as f:
                try:
                    entries.append(json.load(f))
                except json.JSONDecodeError as e:
                    raise ParseError(f"Failed parsing {path}: {e}") from e
        return entries

    def _glob(self, category: str, filename: str) -> list[str]:
        pattern = os.path.join(glob.escape(self.base_path), category, '*', filename)
        return sorted(glob.glob(pattern))
