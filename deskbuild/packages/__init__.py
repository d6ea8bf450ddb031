"""Package descriptor reading, discovery, and scaffolding."""

from deskbuild.packages.metadata_reader import MetadataReader
from deskbuild.packages.discovery import PackageDiscovery, is_enabled, package_paths
from deskbuild.packages.generator import PackageGenerator

__all__ = [
    'MetadataReader', 'PackageDiscovery', 'PackageGenerator',
    'is_enabled', 'package_paths',
]
