"""Build context established once per CLI invocation."""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping

from deskbuild.domain.constants import ROOT_ENV_VAR


@dataclass
class BuildContext:
    """Installation root, mode flags, and options threaded through every task.

    Args:
        root: Absolute installation root.
        debug: Debug build (unminified output, debug client settings).
        standalone: Standalone client build (no server connection).
        environ: Environment snapshot used for placeholder lookups and
            child processes.
        platform: Target platform string, as ``sys.platform``.
        options: Parsed CLI options.
        bundler_args: Extra arguments passed through to the bundler.
    """

    root: str
    debug: bool = False
    standalone: bool = False
    environ: Mapping[str, str] = field(default_factory=dict)
    platform: str = 'linux'
    options: dict[str, Any] = field(default_factory=dict)
    bundler_args: list[str] = field(default_factory=list)

    @classmethod
    def from_environment(cls, root: str | None = None, **kwargs) -> 'BuildContext':
        environ = dict(os.environ)
        root = root or environ.get(ROOT_ENV_VAR) or os.getcwd()
        return cls(
            root=os.path.abspath(root),
            environ=environ,
            platform=sys.platform,
            **kwargs,
        )

    def option(self, name: str, default: Any = None) -> Any:
        value = self.options.get(name)
        return default if value is None else value

    def path(self, *parts: str) -> str:
        return os.path.join(self.root, *parts)
