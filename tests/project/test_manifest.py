"""Tests for reading and writing project manifests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from odm.errors import MalformedLocationError, ManifestNotFoundError, ManifestParseError, OdmError
from odm.project import Project, read_project, resolve_manifest_path, write_project
from odm.project.manifest import dependency_to_manifest, project_to_mapping, read_repository_manifest
from tests._fixtures.project_builder import ProjectBuilder


def test_resolve_manifest_path_accepts_dir_or_file(tmp_path: Path) -> None:
    expected = (tmp_path / "opa.project").resolve()

    assert resolve_manifest_path(tmp_path) == expected
    assert resolve_manifest_path(tmp_path / "opa.project") == expected


def test_read_project_parses_every_field(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "full/opa.project": """
                name: full
                version: 1.2.0
                source: src
                tests:
                  - tst
                  - more
                dependencies:
                  short: file:/../short
                  named:
                    location: git+https://example.com/named.git#v1
                    namespace: other.ns
                  flat:
                    location: file:/../flat
                    namespace: false
                  explicit:
                    location: file:/../explicit
                    namespace: true
                repositories:
                  - file:/../repo
                build:
                  output: out/policy.tar.gz
                  target: wasm
                  entrypoints: [main/allow]
            """
        }
    )

    project = read_project(project_builder.path("full"))

    assert project.root == project_builder.path("full")
    assert project.name == "full"
    assert project.version == "1.2.0"
    assert project.source_dirs == ["src"]
    assert project.test_dirs == ["tst", "more"]
    namespaces = {name: dep.namespace for name, dep in project.dependencies.items()}
    assert namespaces == {"short": "short", "named": "other.ns", "flat": "", "explicit": "explicit"}
    named = project.dependencies["named"].location
    assert named.is_git
    assert (named.url, named.tag) == ("https://example.com/named.git", "v1")
    assert [repo.location.raw for repo in project.repositories] == ["file:/../repo"]
    assert project.build.output == "out/policy.tar.gz"
    assert project.build.target == "wasm"
    assert project.build.entrypoints == ["main/allow"]


def test_read_project_missing_manifest(tmp_path: Path) -> None:
    with pytest.raises(ManifestNotFoundError, match="does not exist"):
        read_project(tmp_path)

    project = read_project(tmp_path, allow_missing=True)
    assert project.root == tmp_path.resolve()
    assert project.dependencies == {}


def test_empty_manifest_is_an_empty_project(project_builder: ProjectBuilder) -> None:
    project_builder.write({"blank/opa.project": ""})

    project = read_project(project_builder.path("blank"))

    assert project.name == ""
    assert project.source_dirs == []


@pytest.mark.parametrize(
    "content, message",
    [
        ("dependencies:\n  foo:\n    location: file:/../foo\n    namespace: 3\n", "invalid namespace type"),
        ("dependencies:\n  foo:\n    namespace: bar\n", "has no location"),
        ("dependencies:\n  - foo\n", "'dependencies' must be a mapping"),
        ("source: {a: b}\n", "'source' must be a string or a list"),
        ("- just\n- a list\n", "must contain a mapping"),
        ("name: [unclosed\n", "failed to parse"),
    ],
)
def test_invalid_manifests_are_rejected(project_builder: ProjectBuilder, content: str, message: str) -> None:
    project_builder.write({"bad/opa.project": content})

    with pytest.raises(ManifestParseError, match=message):
        read_project(project_builder.path("bad"))


def test_malformed_git_location_is_rejected_when_parsing(project_builder: ProjectBuilder) -> None:
    project_builder.write({"bad/opa.project": "dependencies:\n  foo: git+https://x/y.git#a#b\n"})

    with pytest.raises(MalformedLocationError, match="invalid location in project file"):
        read_project(project_builder.path("bad"))


def test_dependency_serialization_forms(tmp_path: Path) -> None:
    project = Project(tmp_path)
    project.set_dependency("same", "file:/../same", "same")
    project.set_dependency("none", "file:/../none", "")
    project.set_dependency("other", "file:/../other", "custom")

    assert dependency_to_manifest(project.dependencies["same"]) == "file:/../same"
    assert dependency_to_manifest(project.dependencies["none"]) == {
        "location": "file:/../none",
        "namespace": False,
    }
    assert dependency_to_manifest(project.dependencies["other"]) == {
        "location": "file:/../other",
        "namespace": "custom",
    }
    assert list(project_to_mapping(project)["dependencies"]) == ["none", "other", "same"]


def test_write_then_read_preserves_declarations(project_builder: ProjectBuilder) -> None:
    root = project_builder.path("written")
    root.mkdir()
    project = Project(root, name="written", source_dirs=["src"], test_dirs=["tst"])
    project.set_dependency("flat", "file:/../flat", "")
    project.build.entrypoints = ["main/allow"]

    manifest = write_project(project)

    data = yaml.safe_load(manifest.read_text(encoding="utf-8"))
    assert data == {
        "name": "written",
        "source": ["src"],
        "tests": ["tst"],
        "dependencies": {"flat": {"location": "file:/../flat", "namespace": False}},
        "build": {"entrypoints": ["main/allow"]},
    }
    reread = read_project(root)
    assert reread.dependencies["flat"].namespace == ""
    assert reread.build.entrypoints == ["main/allow"]


def test_write_project_refuses_to_overwrite(project_builder: ProjectBuilder) -> None:
    project_builder.write({"existing/opa.project": "name: existing\n"})
    project = Project(project_builder.path("existing"), name="replacement")

    with pytest.raises(OdmError, match="already exists"):
        write_project(project)

    write_project(project, override=True)
    assert read_project(project_builder.path("existing")).name == "replacement"


def test_write_empty_project_writes_empty_file(tmp_path: Path) -> None:
    manifest = write_project(Project(tmp_path))

    assert manifest.read_text(encoding="utf-8") == ""


def test_read_repository_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "repository.yaml"
    manifest.write_text(
        "libraries:\n  lib: file:/../lib\n  remote: git+https://example.com/r.git\n",
        encoding="utf-8",
    )

    libraries = read_repository_manifest(manifest)

    assert sorted(libraries) == ["lib", "remote"]
    assert libraries["lib"].is_local
    assert libraries["remote"].is_git
