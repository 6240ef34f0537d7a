"""Reading and writing ``opa.project`` and ``repository.yaml`` manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import (
    FileSystemError,
    MalformedLocationError,
    ManifestNotFoundError,
    ManifestParseError,
    OdmError,
)
from ..logging import get_logger
from .constants import MANIFEST_FILENAME
from .dependency import Dependency
from .location import Location
from .project import BuildConfig, Project
from .repository import Repository

_LOGGER = get_logger("manifest")


def resolve_manifest_path(path: Path | str) -> Path:
    """Map a project directory or manifest path onto ``<dir>/opa.project``."""
    candidate = Path(path).expanduser()
    if candidate.name == MANIFEST_FILENAME:
        return candidate.resolve()
    return (candidate / MANIFEST_FILENAME).resolve()


def read_project(path: Path | str, *, allow_missing: bool = False) -> Project:
    """Read the manifest at ``path`` into a :class:`Project`.

    With ``allow_missing`` an absent manifest yields an empty project rooted
    at the manifest's directory.
    """
    manifest_file = resolve_manifest_path(path)
    root = manifest_file.parent

    if not manifest_file.exists():
        if allow_missing:
            _LOGGER.debug("No manifest at %s, starting from an empty project", manifest_file)
            return Project(root)
        raise ManifestNotFoundError(f"project file {manifest_file} does not exist")

    data = _read_yaml(manifest_file)
    try:
        return project_from_mapping(data, root)
    except MalformedLocationError as exc:
        raise MalformedLocationError(f"invalid location in project file {manifest_file}: {exc}") from exc
    except ManifestParseError as exc:
        raise ManifestParseError(f"failed to parse project file {manifest_file}: {exc}") from exc


def project_from_mapping(data: Dict[str, Any], root: Path) -> Project:
    dependencies: Dict[str, Dependency] = {}
    raw_dependencies = data.get("dependencies")
    if raw_dependencies is not None and not isinstance(raw_dependencies, dict):
        raise ManifestParseError("'dependencies' must be a mapping")
    for name, value in (raw_dependencies or {}).items():
        dependencies[str(name)] = dependency_from_manifest(str(name), value)

    raw_repositories = data.get("repositories")
    if raw_repositories is not None and not isinstance(raw_repositories, list):
        raise ManifestParseError("'repositories' must be a list of locations")
    repositories = [
        Repository(Location.parse(location))
        for location in _as_str_list(raw_repositories, "repositories")
    ]

    build_data = _as_dict(data.get("build"))
    build = BuildConfig(
        output=_as_str(build_data.get("output")) or "",
        target=_as_str(build_data.get("target")) or "",
        entrypoints=_as_str_list(build_data.get("entrypoints"), "build.entrypoints"),
    )

    return Project(
        root,
        name=_as_str(data.get("name")) or "",
        version=_as_str(data.get("version")) or "",
        source_dirs=_as_str_list(data.get("source"), "source"),
        test_dirs=_as_str_list(data.get("tests"), "tests"),
        dependencies=dependencies,
        repositories=repositories,
        build=build,
    )


def dependency_from_manifest(name: str, value: Any) -> Dependency:
    """Parse one ``dependencies`` entry.

    A bare string is the location with the namespace defaulting to the name.
    The mapping form takes ``location`` and ``namespace``: ``false`` disables
    the namespace, ``true`` or absent uses the name, a string is used as is.
    """
    if isinstance(value, str):
        return Dependency(name, Location.parse(value), name)
    if not isinstance(value, dict):
        raise ManifestParseError(f"invalid dependency {name}: expected a location or a mapping")

    location = _as_str(value.get("location"))
    if not location:
        raise ManifestParseError(f"dependency {name} has no location")

    raw_namespace = value.get("namespace")
    if raw_namespace is None or raw_namespace is True:
        namespace = name
    elif raw_namespace is False:
        namespace = ""
    elif isinstance(raw_namespace, str):
        namespace = raw_namespace
    else:
        raise ManifestParseError(
            f"invalid namespace type for dependency {name}: {type(raw_namespace).__name__}"
        )
    return Dependency(name, Location.parse(location), namespace)


def project_to_mapping(project: Project) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if project.name:
        data["name"] = project.name
    if project.version:
        data["version"] = project.version
    if project.source_dirs:
        data["source"] = list(project.source_dirs)
    if project.test_dirs:
        data["tests"] = list(project.test_dirs)
    if project.dependencies:
        data["dependencies"] = {
            dependency.name: dependency_to_manifest(dependency)
            for dependency in project.sorted_dependencies()
        }
    if project.repositories:
        data["repositories"] = [repository.location.raw for repository in project.repositories]

    build: Dict[str, Any] = {}
    if project.build.output:
        build["output"] = project.build.output
    if project.build.target:
        build["target"] = project.build.target
    if project.build.entrypoints:
        build["entrypoints"] = list(project.build.entrypoints)
    if build:
        data["build"] = build
    return data


def dependency_to_manifest(dependency: Dependency) -> Any:
    if dependency.namespace == dependency.name:
        return dependency.location.raw
    if not dependency.namespace:
        return {"location": dependency.location.raw, "namespace": False}
    return {"location": dependency.location.raw, "namespace": dependency.namespace}


def write_project(project: Project, path: Path | str | None = None, *, override: bool = False) -> Path:
    """Serialise ``project`` to its manifest; refuses to clobber unless ``override``."""
    manifest_file = resolve_manifest_path(path) if path is not None else project.manifest_file
    _LOGGER.debug("Writing project file to %s", manifest_file)

    if not override and manifest_file.exists():
        raise OdmError(f"project file {manifest_file} already exists")

    text = yaml.safe_dump(
        project_to_mapping(project),
        sort_keys=False,
        default_flow_style=False,
    )
    if text.strip() == "{}":
        text = ""
    try:
        manifest_file.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(f"failed to write project file {manifest_file}: {exc}", manifest_file) from exc
    return manifest_file


def read_repository_manifest(path: Path) -> Dict[str, Location]:
    """Return the ``libraries`` table of a ``repository.yaml``."""
    data = _read_yaml(path)
    libraries = data.get("libraries")
    if libraries is None:
        return {}
    if not isinstance(libraries, dict):
        raise ManifestParseError(f"'libraries' in {path} must be a mapping")

    table: Dict[str, Location] = {}
    for name, location in libraries.items():
        value = _as_str(location)
        if not value:
            raise ManifestParseError(f"library {name} in {path} has no location")
        table[str(name)] = Location.parse(value)
    return table


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(f"failed to read file {path}: {exc}", path) from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"failed to parse {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ManifestParseError(f"{path} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_str_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        items: List[str] = []
        for item in value:
            text = _as_str(item)
            if text is None:
                raise ManifestParseError(f"'{field_name}' entries must be strings")
            if text:
                items.append(text)
        return items
    raise ManifestParseError(f"'{field_name}' must be a string or a list of strings")


__all__ = [
    "dependency_from_manifest",
    "dependency_to_manifest",
    "project_from_mapping",
    "project_to_mapping",
    "read_project",
    "read_repository_manifest",
    "resolve_manifest_path",
    "write_project",
]
