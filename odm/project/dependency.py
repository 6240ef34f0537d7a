"""Dependencies: edges of the project graph and their materialization."""

from __future__ import annotations

import weakref
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from ..errors import CommandError, OdmError, UnsupportedLocationError
from ..fsutil import filter_existing, reset_dir, resolve_path
from ..ids import dependency_id
from .constants import (
    DEPENDENCIES_DIR,
    DOT_OPA_DIR,
    MANIFEST_FILENAME,
    REPOSITORIES_DIR,
    ROOT_PACKAGE,
)
from .context import ResolveContext
from .location import Location

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .project import Project


class Dependency:
    """A named dependency declared by a project.

    ``parent`` is a weak link to the dependency whose project declared this
    one; it is ``None`` for dependencies of the root project. ``project`` is
    the nested project read from the materialized ``opa.project``, if any.
    """

    def __init__(
        self,
        name: str,
        location: Location,
        namespace: str = "",
        *,
        parent: Optional["Dependency"] = None,
    ) -> None:
        self.name = name
        self.location = location
        self.namespace = namespace
        self._parent: Optional[weakref.ReferenceType[Dependency]] = None
        self.parent = parent
        self.project: Optional[Project] = None
        self._path: Optional[Path] = None

    def __repr__(self) -> str:
        return (
            f"Dependency(name={self.name!r}, location={self.location.raw!r}, "
            f"namespace={self.namespace!r})"
        )

    @property
    def parent(self) -> Optional["Dependency"]:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, value: Optional["Dependency"]) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def is_resolved(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Path:
        """Directory holding the materialized content."""
        if self._path is None:
            raise OdmError(f"dependency {self.name} has not been updated or loaded")
        return self._path

    def full_namespace(self) -> str:
        """Compose the namespace from the parent chain.

        Computed on every call since parent links are only set during the
        update/load recursion.
        """
        parent = self.parent
        if parent is None or not parent.namespace:
            return self.namespace
        parent_namespace = parent.full_namespace()
        if not parent_namespace:
            return self.namespace
        if not self.namespace:
            return parent_namespace
        return f"{parent_namespace}.{self.namespace}"

    def id(self) -> str:
        return dependency_id(self.full_namespace(), self.location.raw)

    def directory(self, deps_root: Path) -> Path:
        return deps_root / self.id()

    def source_dirs(self) -> List[Path]:
        """Own source directories, or the dependency root when none are declared."""
        root = self.path
        if self.project is not None and self.project.source_dirs:
            return [resolve_path(root, directory) for directory in self.project.source_dirs]
        return [root]

    def test_dirs(self) -> List[Path]:
        root = self.path
        if self.project is not None and self.project.test_dirs:
            return [resolve_path(root, directory) for directory in self.project.test_dirs]
        return []

    # ------------------------------------------------------------------
    # Resolution

    def update(
        self,
        parent_project: "Project",
        root_dir: Path,
        deps_root: Path,
        context: ResolveContext,
    ) -> None:
        """Fetch this dependency and, recursively, everything it declares."""
        target_dir = self.directory(deps_root)
        context.logger.info("Updating dependency %s (%s)", self.name, self.location)
        context.logger.debug("Dependency %s materializes into %s", self.name, target_dir)
        reset_dir(target_dir)

        location = self.resolve_location(parent_project, context)
        location.materialize(root_dir, target_dir, context)

        self.project = self._read_project(target_dir)
        self._path = target_dir

        if self.project is not None:
            context.logger.debug("Updating transitive dependencies for %s (%s)", self.name, self.id())
            self.project.update_tree(
                root_dir,
                target_dir / DOT_OPA_DIR / DEPENDENCIES_DIR,
                target_dir / DOT_OPA_DIR / REPOSITORIES_DIR,
                context,
                parent=self,
            )

        self._rewrite_namespace(context)

    def load(self, root_dir: Path, deps_root: Path, context: ResolveContext) -> "Dependency":
        """Rebuild the in-memory tree from a previous update without touching disk."""
        target_dir = self.directory(deps_root)
        if not target_dir.is_dir():
            context.logger.debug("Dependency %s has not been materialized at %s", self.name, target_dir)
        self.project = self._read_project(target_dir)
        self._path = target_dir

        if self.project is not None:
            context.logger.debug("Loading transitive dependencies for %s (%s)", self.name, self.id())
            self.project.load_tree(
                root_dir,
                target_dir / DOT_OPA_DIR / DEPENDENCIES_DIR,
                target_dir / DOT_OPA_DIR / REPOSITORIES_DIR,
                context,
                parent=self,
            )
        return self

    def resolve_location(self, parent_project: "Project", context: ResolveContext) -> Location:
        """Return a fetchable location, consulting repositories for library names."""
        if self.location.is_supported:
            return self.location
        for repository in parent_project.repositories:
            found = repository.find(self.location.raw)
            if found is not None:
                context.logger.debug(
                    "Resolved library %s to %s via repository %s",
                    self.location.raw,
                    found,
                    repository.location,
                )
                return found
        raise UnsupportedLocationError(f"unsupported dependency location: {self.location}")

    # ------------------------------------------------------------------
    # Internals

    def _read_project(self, target_dir: Path) -> Optional["Project"]:
        from .manifest import read_project

        manifest_file = target_dir / MANIFEST_FILENAME
        if not manifest_file.is_file():
            return None
        return read_project(manifest_file)

    def _rewrite_namespace(self, context: ResolveContext) -> None:
        namespace = self.full_namespace()
        if not namespace:
            return

        paths = self._refactor_paths()
        if not paths:
            context.logger.debug("Dependency %s has no source, skipping namespace refactoring", self.name)
            return

        try:
            context.opa(paths).refactor(ROOT_PACKAGE, f"{ROOT_PACKAGE}.{namespace}")
        except CommandError as exc:
            raise CommandError(f"failed to refactor namespace {namespace}: {exc}", exc.output) from exc

    def _refactor_paths(self) -> List[Path]:
        paths: List[Path] = []
        for candidate in filter_existing([*self.source_dirs(), *self.test_dirs()]):
            paths.extend(self._outside_nested_tree(candidate))
        return _dedupe(paths)

    def _outside_nested_tree(self, path: Path) -> List[Path]:
        # Nested dependencies under .opa already carry their composed namespace.
        # A directory enclosing .opa is replaced by its non-hidden children.
        dot_opa = (self.path / DOT_OPA_DIR).resolve()
        if not path.is_dir() or path.resolve() not in dot_opa.parents:
            return [path]
        paths: List[Path] = []
        for child in sorted(path.iterdir()):
            if child.name.startswith("."):
                continue
            if child.is_dir():
                paths.extend(self._outside_nested_tree(child))
            elif child.suffix == ".rego":
                paths.append(child)
        return paths


def _dedupe(paths: List[Path]) -> List[Path]:
    seen = set()
    unique: List[Path] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        unique.append(path)
    return unique


__all__ = ["Dependency"]
