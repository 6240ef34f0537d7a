"""The project aggregate: declared sources, dependencies and repositories."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from ..errors import DependencyError, OdmError, RepositoryError
from ..fsutil import filter_existing, make_dir, reset_dir, resolve_path
from .constants import (
    DEPENDENCIES_DIR,
    DOT_OPA_DIR,
    MANIFEST_FILENAME,
    REPOSITORIES_DIR,
)
from .context import ResolveContext
from .dependency import Dependency
from .location import Location
from .repository import Repository


@dataclass
class BuildConfig:
    """Bundle build settings from the ``build`` manifest section."""

    output: str = ""
    target: str = ""
    entrypoints: List[str] = field(default_factory=list)


class Project:
    """A project rooted at the directory holding its ``opa.project``.

    ``root`` is fixed at construction; every relative path declared in the
    manifest resolves against it.
    """

    def __init__(
        self,
        root: Path,
        *,
        name: str = "",
        version: str = "",
        source_dirs: Sequence[str] = (),
        test_dirs: Sequence[str] = (),
        dependencies: Optional[Dict[str, Dependency]] = None,
        repositories: Sequence[Repository] = (),
        build: Optional[BuildConfig] = None,
    ) -> None:
        self._root = Path(root)
        self.name = name
        self.version = version
        self.source_dirs: List[str] = list(source_dirs)
        self.test_dirs: List[str] = list(test_dirs)
        self.dependencies: Dict[str, Dependency] = dict(dependencies or {})
        self.repositories: List[Repository] = list(repositories)
        self.build = build or BuildConfig()

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, root={str(self._root)!r})"

    @property
    def root(self) -> Path:
        return self._root

    @property
    def manifest_file(self) -> Path:
        return self._root / MANIFEST_FILENAME

    @property
    def dot_opa_dir(self) -> Path:
        return self._root / DOT_OPA_DIR

    @property
    def dependencies_dir(self) -> Path:
        return self.dot_opa_dir / DEPENDENCIES_DIR

    @property
    def repositories_dir(self) -> Path:
        return self.dot_opa_dir / REPOSITORIES_DIR

    def set_dependency(self, name: str, location: Location | str, namespace: str = "") -> Dependency:
        """Declare (or replace) the dependency ``name``; the last declaration wins."""
        if isinstance(location, str):
            location = Location.parse(location)
        dependency = Dependency(name, location, namespace)
        self.dependencies[name] = dependency
        return dependency

    def sorted_dependencies(self) -> List[Dependency]:
        return [self.dependencies[name] for name in sorted(self.dependencies)]

    # ------------------------------------------------------------------
    # Resolution

    def update(self, context: Optional[ResolveContext] = None) -> None:
        """Re-fetch every repository and dependency below ``.opa``."""
        context = context or ResolveContext.from_settings()
        context.logger.info("Updating project '%s'", self.name or self._root.name)
        make_dir(self.dot_opa_dir)
        reset_dir(self.dependencies_dir)
        reset_dir(self.repositories_dir)
        self.update_tree(
            self._root,
            self.dependencies_dir,
            self.repositories_dir,
            context,
            parent=None,
        )

    def load(self, context: Optional[ResolveContext] = None) -> None:
        """Build the dependency tree from what a previous update left on disk."""
        context = context or ResolveContext.from_settings()
        self.load_tree(
            self._root,
            self.dependencies_dir,
            self.repositories_dir,
            context,
            parent=None,
        )

    def update_tree(
        self,
        root_dir: Path,
        deps_root: Path,
        repos_root: Path,
        context: ResolveContext,
        *,
        parent: Optional[Dependency],
    ) -> None:
        # Repositories first so library names can be resolved by dependencies.
        for repository in self.repositories:
            try:
                repository.update(root_dir, repos_root, context)
            except OdmError as exc:
                raise RepositoryError(f"failed to update repository {repository.location}: {exc}") from exc

        for dependency in self.sorted_dependencies():
            dependency.parent = parent
            try:
                dependency.update(self, root_dir, deps_root, context)
            except OdmError as exc:
                raise DependencyError(f"failed to update dependency {dependency.name}: {exc}") from exc

    def load_tree(
        self,
        root_dir: Path,
        deps_root: Path,
        repos_root: Path,
        context: ResolveContext,
        *,
        parent: Optional[Dependency],
    ) -> None:
        for repository in self.repositories:
            try:
                repository.load(repos_root, context)
            except OdmError as exc:
                raise RepositoryError(f"failed to load repository {repository.location}: {exc}") from exc

        for dependency in self.sorted_dependencies():
            dependency.parent = parent
            try:
                dependency.load(root_dir, deps_root, context)
            except OdmError as exc:
                raise DependencyError(f"failed to load dependency {dependency.name}: {exc}") from exc

    # ------------------------------------------------------------------
    # Traversal

    def walk(self) -> Iterator[Dependency]:
        from .tree import walk_dependencies

        return walk_dependencies(self)

    def own_source_dirs(self) -> List[Path]:
        if self.source_dirs:
            return [resolve_path(self._root, directory) for directory in self.source_dirs]
        return [self._root]

    def own_test_dirs(self) -> List[Path]:
        return [resolve_path(self._root, directory) for directory in self.test_dirs]

    def data_locations(self) -> List[Path]:
        """Existing source directories of the project and its whole dependency tree.

        The project's own locations come first.
        """
        locations: List[Path] = list(self.own_source_dirs())
        for dependency in self.walk():
            locations.extend(dependency.source_dirs())
        return filter_existing(locations)

    def test_locations(self, include_dependencies: bool = False) -> List[Path]:
        """Test directories; unlike data locations these are not existence-filtered."""
        locations: List[Path] = list(self.own_test_dirs())
        if include_dependencies:
            for dependency in self.walk():
                locations.extend(dependency.test_dirs())
        return locations


__all__ = ["BuildConfig", "Project"]
