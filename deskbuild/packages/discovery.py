"""Package discovery across repositories and overlays.

Each repository is searched in ``src/packages/<repo>`` first and then in
every overlay ``packages`` directory. Descriptors are read concurrently but
merged in search order, so when two search paths provide the same qualified
name the one processed last wins. Repositories merge the same way, in the
order given.
"""
import glob
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Sequence

from deskbuild.config.overlays import read_overlay_paths
from deskbuild.config.tree import get_configuration
from deskbuild.context import BuildContext
from deskbuild.domain.constants import METADATA_FILE, PACKAGES_DIR
from deskbuild.domain.models import PackageMetadata
from deskbuild.errors import NotFoundError
from deskbuild.packages.metadata_reader import MetadataReader

logger = logging.getLogger(__name__)

PackageFilter = Callable[[PackageMetadata, str], bool]


def package_paths(ctx: BuildContext, cfg: Any, repo: str) -> list[str]:
    """Search paths for one repository: the primary directory, then overlays."""
    return [ctx.path(*PACKAGES_DIR, repo)] + read_overlay_paths(ctx, cfg, 'packages')


def is_enabled(force_enabled: Sequence[str], force_disabled: Sequence[str], metadata: PackageMetadata) -> bool:
    """Apply the enable/disable policy to one descriptor.

    Explicitly disabled packages survive only when force-enabled; all other
    packages are dropped only when force-disabled. Both lists match either
    the short name or the qualified name.
    """
    names = (metadata.short_name, metadata.name)
    if str(metadata.enabled).lower() == 'false':
        return any(n in force_enabled for n in names)
    return not any(n in force_disabled for n in names)


class PackageDiscovery:
    """Finds, normalizes, and filters package descriptors."""

    def __init__(self, ctx: BuildContext, cfg: Any):
        self.ctx = ctx
        self.cfg = cfg
        self.reader = MetadataReader(ctx)
        self.force_enabled = list(get_configuration(cfg, 'packages.ForceEnable', None) or [])
        self.force_disabled = list(get_configuration(cfg, 'packages.ForceDisable', None) or [])

    def repositories(self) -> list[str]:
        """Repositories from ``--repositories`` (comma separated) or the tree."""
        cli_repos = ''.join(str(self.ctx.option('repositories', '')).split())
        if cli_repos:
            return [r for r in cli_repos.split(',') if r]
        return list(get_configuration(self.cfg, 'repositories', None) or [])

    def discover(self, repositories: Iterable[str]) -> dict[str, PackageMetadata]:
        """Name-keyed metadata of every enabled package in ``repositories``."""
        repositories = list(repositories)
        result: dict[str, PackageMetadata] = {}
        with ThreadPoolExecutor() as pool:
            for packages in pool.map(self.discover_repository, repositories):
                result.update(packages)
        return result

    def discover_repository(self, repo: str) -> dict[str, PackageMetadata]:
        files = self.metadata_files(repo)
        with ThreadPoolExecutor() as pool:
            descriptors = list(pool.map(lambda f: self.reader.read_one(f, repo), files))

        result: dict[str, PackageMetadata] = {}
        for metadata in descriptors:
            if is_enabled(self.force_enabled, self.force_disabled, metadata):
                result[metadata.name] = metadata
            else:
                logger.debug("Skipping disabled package %s", metadata.name)
        return result

    def metadata_files(self, repo: str) -> list[str]:
        files: list[str] = []
        for path in package_paths(self.ctx, self.cfg, repo):
            pattern = os.path.join(glob.escape(path), '*', METADATA_FILE)
            files.extend(sorted(glob.glob(pattern)))
        return files

    def get_metadata(self, predicate: PackageFilter | None = None) -> dict[str, PackageMetadata]:
        """Discover the configured repositories, optionally filtered by ``(metadata, name)``."""
        packages = self.discover(self.repositories())
        if predicate is None:
            return packages
        return {name: meta for name, meta in packages.items() if predicate(meta, name)}

    def get_package_metadata(self, name: str) -> PackageMetadata:
        """Metadata for one ``repo/package`` from the first search path that has it."""
        repo, _, short_name = name.partition('/')
        if not repo or not short_name:
            raise NotFoundError(f"Invalid package name: {name}")

        for path in package_paths(self.ctx, self.cfg, repo):
            candidate = os.path.join(path, short_name, METADATA_FILE)
            if os.path.isfile(candidate):
                return self.reader.read_one(candidate, repo)
        raise NotFoundError(f"Package not found: {name}")
