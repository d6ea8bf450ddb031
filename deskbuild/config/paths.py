"""Platform path normalization for generated configuration."""

import re
from typing import Any

_ESCAPE_RE = re.compile(r'(["\s\'$`\\])')
_BACKSLASHES_RE = re.compile(r'\\+')


def is_windows(platform: str) -> bool:
    return platform.startswith('win')


def fix_win_path(value: Any, platform: str) -> Any:
    """Rewrite a Windows path into the forward-slash form the tooling expects.

    Shell-sensitive characters are backslash-escaped first, then every run
    of backslashes collapses into a single ``/``. Non-strings and other
    platforms pass through unchanged.
    """
    if isinstance(value, str) and is_windows(platform):
        return _BACKSLASHES_RE.sub('/', _ESCAPE_RE.sub(r'\\\1', value))
    return value
