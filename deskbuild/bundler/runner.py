"""Runs the external bundler for the core, themes, and packages."""
import logging
from typing import Any

from deskbuild.bundler.options import encode_environment
from deskbuild.config.tree import get_configuration
from deskbuild.domain.constants import CLIENT_DIR, DEFAULT_BUNDLER, DEFAULT_BUNDLER_ARGS, THEMES_DIR, WATCH_ARGS
from deskbuild.errors import NotFoundError
from deskbuild.packages.discovery import PackageDiscovery
from deskbuild.task_runner import TaskRunner

logger = logging.getLogger(__name__)


class BundlerRunner:
    """Invokes the bundler out of process with the encoded build options.

    There is no timeout: a hung bundler hangs the task.
    """

    def __init__(self, runner: TaskRunner, cfg: Any):
        self.runner = runner
        self.ctx = runner.ctx
        self.cfg = cfg
        self.discovery = PackageDiscovery(self.ctx, cfg)

    @property
    def command(self) -> str:
        return str(get_configuration(self.cfg, 'build.bundler', None) or DEFAULT_BUNDLER)

    def default_args(self) -> list[str]:
        return list(self.ctx.bundler_args) or list(DEFAULT_BUNDLER_ARGS)

    def execute(self, cwd: str, args: list[str] | None = None) -> None:
        self.runner.shell([self.command] + list(args or []), cwd=cwd, env=encode_environment(self.ctx))

    def build_core(self) -> None:
        logger.info("Building core")
        self.execute(self.ctx.path(*CLIENT_DIR), self.default_args())

    def build_themes(self) -> None:
        logger.info("Building themes")
        self.execute(self.ctx.path(*THEMES_DIR), self.default_args())

    def build_package(self, name: str) -> None:
        metadata = self.discovery.get_package_metadata(name)
        logger.info("Building %s", metadata.name)
        self.execute(self.ctx.path(metadata.src))

    def build_packages(self) -> None:
        """Build every discovered package in order; the first failure aborts."""
        for name in self.discovery.get_metadata():
            self.build_package(name)

    def watch(self, package: str | None = None, themes: bool = False) -> None:
        if package:
            packages = self.discovery.get_metadata(lambda meta, name: name == package)
            if package not in packages:
                raise NotFoundError(f"No such package: {package}")
            logger.info("Starting watch for %s", package)
            self.execute(self.ctx.path(packages[package].src), WATCH_ARGS)
        elif themes:
            logger.info("Starting watch for themes")
            self.execute(self.ctx.path(*THEMES_DIR), WATCH_ARGS)
        else:
            logger.info("Starting watch")
            self.execute(self.ctx.path(*CLIENT_DIR), WATCH_ARGS)
