"""Repositories: fetched tables of named library locations."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from ..errors import MissingRepositoryManifestError, UnsupportedLocationError
from ..fsutil import reset_dir
from ..ids import repository_id
from .constants import REPOSITORY_MANIFEST_FILENAME
from .context import ResolveContext
from .location import Location


class Repository:
    """A repository declared by a project.

    The library table stays empty until the repository has been fetched (or
    loaded from a previous fetch) and its ``repository.yaml`` parsed.
    """

    def __init__(self, location: Location) -> None:
        self.location = location
        self.libraries: Dict[str, Location] = {}
        self.path: Optional[Path] = None

    def __repr__(self) -> str:
        return f"Repository(location={self.location.raw!r}, libraries={sorted(self.libraries)!r})"

    def id(self) -> str:
        return repository_id(self.location.raw)

    def directory(self, repos_root: Path) -> Path:
        return repos_root / self.id()

    def find(self, name: str) -> Optional[Location]:
        return self.libraries.get(name)

    def update(self, root_dir: Path, repos_root: Path, context: ResolveContext) -> None:
        """Re-fetch the repository into its directory under ``repos_root``."""
        target_dir = self.directory(repos_root)
        context.logger.info("Updating repository %s", self.location)
        reset_dir(target_dir)

        if not self.location.is_supported:
            raise UnsupportedLocationError(f"unsupported location type: {self.location}")
        self.location.materialize(root_dir, target_dir, context)

        manifest_file = target_dir / REPOSITORY_MANIFEST_FILENAME
        if not manifest_file.is_file():
            raise MissingRepositoryManifestError(
                f"no {REPOSITORY_MANIFEST_FILENAME} found in repository {self.location}"
            )
        self._read_libraries(manifest_file)
        self.path = target_dir

    def load(self, repos_root: Path, context: ResolveContext) -> None:
        """Read the library table of an already fetched repository, if present."""
        target_dir = self.directory(repos_root)
        self.path = target_dir
        manifest_file = target_dir / REPOSITORY_MANIFEST_FILENAME
        if manifest_file.is_file():
            self._read_libraries(manifest_file)
        else:
            context.logger.debug("Repository %s has not been fetched", self.location)

    def _read_libraries(self, manifest_file: Path) -> None:
        from .manifest import read_repository_manifest

        self.libraries = read_repository_manifest(manifest_file)


__all__ = ["Repository"]
