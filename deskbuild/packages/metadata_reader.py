"""Reads a single package descriptor (metadata.json)."""
import json
import os

from deskbuild.context import BuildContext
from deskbuild.domain.enums import PackageType
from deskbuild.domain.models import PackageMetadata, PreloadAsset
from deskbuild.errors import ParseError


class MetadataReader:
    """Loads and normalizes package descriptors."""

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx

    def read_one(self, metadata_file: str, repo: str | None = None) -> PackageMetadata:
        """Read one descriptor.

        The qualified name is ``<repo>/<package directory>``; without a
        ``repo`` hint the grandparent directory names the repository.

        Raises:
            ParseError: The descriptor is not a valid JSON object.
            OSError: The descriptor cannot be read.
        """
        package_dir = os.path.dirname(os.path.abspath(metadata_file))
        repo = repo or os.path.basename(os.path.dirname(package_dir))
        name = f"{repo}/{os.path.basename(package_dir)}"

        data = self._load(metadata_file)
        preload = list(data.get('preload') or []) + list(data.get('sources') or [])

        return PackageMetadata(
            name=name,
            repo=repo,
            type=data.get('type') or PackageType.APPLICATION.value,
            src=self._relative_src(package_dir),
            preload=[PreloadAsset.parse(entry) for entry in preload],
            build=data.get('build') or {},
            data=data,
        )

    def _relative_src(self, package_dir: str) -> str:
        relative = os.path.relpath(package_dir, self.ctx.root)
        if relative.startswith(os.pardir):
            return package_dir
        return relative.replace(os.sep, '/')

    @staticmethod
    def _load(metadata_file: str) -> dict:
        with open(metadata_file, encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ParseError(f"Failed parsing {metadata_file}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(f"{metadata_file} does not contain an object")
        return data
