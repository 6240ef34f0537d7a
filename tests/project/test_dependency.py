"""Tests for odm.project.dependency."""

from __future__ import annotations

from pathlib import Path

import pytest

from odm.errors import OdmError
from odm.ids import dependency_id
from odm.project import Dependency, Location, Project


def _dep(name: str, namespace: str, parent: Dependency | None = None) -> Dependency:
    return Dependency(name, Location.parse(f"file:/../{name}"), namespace, parent=parent)


def test_full_namespace_composes_ancestors() -> None:
    a = _dep("a", "a")
    b = _dep("b", "b", parent=a)
    c = _dep("c", "", parent=b)

    assert b.full_namespace() == "a.b"
    assert c.full_namespace() == "a.b"


def test_full_namespace_skips_empty_parent() -> None:
    a = _dep("a", "")
    b = _dep("b", "b", parent=a)

    assert b.full_namespace() == "b"


def test_full_namespace_empty_without_namespaces() -> None:
    assert _dep("a", "").full_namespace() == ""
    assert _dep("b", "", parent=_dep("a", "")).full_namespace() == ""


def test_full_namespace_follows_relinked_parent() -> None:
    a = _dep("a", "a")
    other = _dep("other", "other")
    b = _dep("b", "b", parent=a)
    assert b.full_namespace() == "a.b"

    b.parent = other

    assert b.full_namespace() == "other.b"


def test_parent_link_is_weak() -> None:
    parent = _dep("a", "a")
    child = _dep("b", "b", parent=parent)
    del parent

    assert child.parent is None
    assert child.full_namespace() == "b"


def test_directory_uses_full_namespace_and_raw_location(tmp_path: Path) -> None:
    foo = Dependency("foo", Location.parse("file:/../local-dependencies"), "foo")
    no_deps = Dependency("no_deps", Location.parse("file:/../no-dependencies"), "no_deps", parent=foo)

    assert no_deps.directory(tmp_path) == tmp_path / dependency_id(
        "foo.no_deps", "file:/../no-dependencies"
    )


def test_paths_require_resolution() -> None:
    dependency = _dep("a", "a")

    assert dependency.is_resolved is False
    with pytest.raises(OdmError, match="has not been updated or loaded"):
        dependency.source_dirs()


def test_source_and_test_dirs_follow_nested_manifest(tmp_path: Path) -> None:
    dependency = _dep("a", "a")
    dependency._path = tmp_path  # simulate a completed load
    assert dependency.source_dirs() == [tmp_path]
    assert dependency.test_dirs() == []

    dependency.project = Project(tmp_path, source_dirs=["src", "lib"], test_dirs=["tst"])

    assert dependency.source_dirs() == [tmp_path / "src", tmp_path / "lib"]
    assert dependency.test_dirs() == [tmp_path / "tst"]
