"""Depth-first traversal over a resolved dependency tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List, Tuple

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .dependency import Dependency
    from .project import Project


def iter_tree(project: "Project", depth: int = 1) -> Iterator[Tuple[int, "Dependency"]]:
    """Yield ``(depth, dependency)`` pairs in pre-order, siblings sorted by name."""
    for dependency in project.sorted_dependencies():
        yield depth, dependency
        if dependency.project is not None:
            yield from iter_tree(dependency.project, depth + 1)


def walk_dependencies(project: "Project") -> Iterator["Dependency"]:
    for _, dependency in iter_tree(project):
        yield dependency


def format_tree(project: "Project", label: str = "root") -> str:
    """Render the tree as indented lines, ``name (project name)`` per node."""
    lines: List[str] = [_node_label(label, project.name)]
    for depth, dependency in iter_tree(project):
        nested_name = dependency.project.name if dependency.project is not None else ""
        lines.append("  " * depth + _node_label(dependency.name, nested_name))
    return "\n".join(lines)


def _node_label(name: str, project_name: str) -> str:
    return f"{name} ({project_name})" if project_name else name


__all__ = ["format_tree", "iter_tree", "walk_dependencies"]
