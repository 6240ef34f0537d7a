"""Project model: manifests, dependencies, repositories and their resolution."""

from .context import ResolveContext
from .dependency import Dependency
from .location import Location, LocationKind
from .manifest import read_project, resolve_manifest_path, write_project
from .project import BuildConfig, Project
from .repository import Repository
from .tree import format_tree, iter_tree, walk_dependencies

__all__ = [
    "BuildConfig",
    "Dependency",
    "Location",
    "LocationKind",
    "Project",
    "Repository",
    "ResolveContext",
    "format_tree",
    "iter_tree",
    "read_project",
    "resolve_manifest_path",
    "walk_dependencies",
    "write_project",
]
