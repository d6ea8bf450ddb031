"""Resolves ``%NAME%`` placeholders inside a configuration tree.

Substitution is textual: the tree is serialized to JSON, every distinct
token is replaced in first-seen order, and the text is parsed again at the
end. Two consequences are accepted behaviour:

  * a replacement that itself contains a ``%TOKEN%`` is not resolved again;
  * a replacement with unescaped JSON characters (quotes, backslashes) can
    break the document, which surfaces as a ``ParseError``.
"""
import json
from typing import Any, Mapping

from deskbuild.config.paths import fix_win_path
from deskbuild.config.tree import get_configuration
from deskbuild.domain.constants import ENV_NAME_RE, PLACEHOLDER_RE, RESERVED_TOKENS, ROOT_TOKEN
from deskbuild.errors import ParseError


class PlaceholderResolver:
    """Replaces environment and tree-lookup placeholders."""

    def __init__(self, environ: Mapping[str, str], platform: str) -> None:
        self._environ = environ
        self._platform = platform

    def resolve(self, tree: Any, root: str, lookup: Any = None) -> Any:
        """Resolve all placeholders in ``tree``.

        Args:
            tree: JSON-compatible tree to resolve; not modified.
            root: Value substituted for ``%ROOT%``.
            lookup: Tree used for dot-path lookups. Defaults to ``tree``
                itself after ``%ROOT%`` substitution.

        Returns:
            A new resolved tree.
        """
        text = self._substitute_root(json.dumps(tree), root)
        if lookup is None:
            lookup = json.loads(text)

        for token in self.find_tokens(text):
            if token in RESERVED_TOKENS:
                continue
            text = text.replace(token, self._lookup_value(token[1:-1], lookup))

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Placeholder substitution produced invalid JSON: {e}") from e

    def substitute_root(self, tree: Any, root: str) -> Any:
        """Copy of ``tree`` with only ``%ROOT%`` replaced."""
        try:
            return json.loads(self._substitute_root(json.dumps(tree), root))
        except json.JSONDecodeError as e:
            raise ParseError(f"Root substitution produced invalid JSON: {e}") from e

    def _substitute_root(self, text: str, root: str) -> str:
        return text.replace(ROOT_TOKEN, fix_win_path(root, self._platform))

    @staticmethod
    def find_tokens(text: str) -> list[str]:
        """Distinct ``%TOKEN%`` strings in first-seen order."""
        seen: dict[str, None] = {}
        for match in PLACEHOLDER_RE.finditer(text):
            seen.setdefault(match.group(0), None)
        return list(seen)

    def _lookup_value(self, name: str, lookup: Any) -> str:
        value = None
        if ENV_NAME_RE.fullmatch(name):
            value = self._environ.get(name)
        if not value:
            value = get_configuration(lookup, name, '')
        return _render(value)


def _render(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=dict, separators=(',', ':'))
    return str(value)
