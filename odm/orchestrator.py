"""Pipelines behind the odm commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import Settings, load_settings
from .errors import OdmError
from .fsutil import make_dir
from .logging import get_logger
from .process import Runner
from .project import Project, ResolveContext, format_tree, read_project, write_project
from .project.constants import DEFAULT_BUILD_DIR, DEFAULT_BUNDLE_FILE, DEFAULT_SOURCE_DIR, DOT_OPA_DIR


@dataclass
class BuildOutcome:
    """Result of an ``opa build`` run."""

    bundle_path: Path
    output: str


class Orchestrator:
    """Coordinates project updates and policy engine runs."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        git_runner: Runner | None = None,
        opa_runner: Runner | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.logger = get_logger("orchestrator")
        self.context = ResolveContext.from_settings(
            self.settings,
            git_runner=git_runner,
            opa_runner=opa_runner,
            logger=get_logger("resolve"),
        )

    def run_init(
        self,
        path: str | Path = ".",
        *,
        name: str = "",
        source_dir: Optional[str] = DEFAULT_SOURCE_DIR,
    ) -> Path:
        """Create a project directory with a fresh manifest and ``.opa`` folder."""
        project_dir = Path(path).expanduser().resolve()
        self.logger.info("Initializing OPA project: %s", name or project_dir.name)
        if project_dir.exists():
            self.logger.debug("Directory %s already exists, not creating new", project_dir)
        make_dir(project_dir)

        project = Project(project_dir, name=name, source_dirs=[source_dir] if source_dir else [])
        manifest_file = write_project(project, override=False)

        dot_opa = project_dir / DOT_OPA_DIR
        if dot_opa.exists():
            self.logger.debug("Directory %s already exists, not creating new", dot_opa)
        make_dir(dot_opa)
        return manifest_file

    def run_depend(
        self,
        name: str,
        location: str,
        *,
        namespace: str = "",
        path: str | Path = ".",
    ) -> Project:
        """Add or replace a dependency in the manifest at ``path``."""
        self.logger.info("Setting dependency '%s' @ '%s'", name, location)
        project = read_project(path, allow_missing=True)
        project.set_dependency(name, location, namespace)
        write_project(project, override=True)
        return project

    def run_update(self, path: str | Path = ".") -> Project:
        """Re-fetch all dependencies and return the freshly loaded project."""
        project = read_project(path)
        project.update(self.context)
        return self.load_project(path)

    def load_project(self, path: str | Path = ".", *, allow_missing: bool = False) -> Project:
        project = read_project(path, allow_missing=allow_missing)
        project.load(self.context)
        return project

    def run_eval(self, path: str | Path = ".", args: Sequence[str] = (), *, update: bool = True) -> str:
        project = self._prepare(path, update)
        locations = self._data_locations(project)
        return self.context.opa(locations).eval(args)

    def run_test(
        self,
        path: str | Path = ".",
        args: Sequence[str] = (),
        *,
        include_dependencies: bool = False,
        update: bool = True,
    ) -> str:
        project = self._prepare(path, update)
        locations = self._data_locations(project)
        try:
            test_locations = project.test_locations(include_dependencies)
        except OdmError as exc:
            raise OdmError(f"error getting test locations: {exc}") from exc
        return self.context.opa([*locations, *test_locations]).test(args)

    def run_build(self, path: str | Path = ".", args: Sequence[str] = (), *, update: bool = True) -> BuildOutcome:
        project = self._prepare(path, update)
        bundle_path = self.bundle_path(project)
        make_dir(bundle_path.parent)

        locations = self._data_locations(project)
        opa = (
            self.context.opa(locations)
            .with_entrypoints(project.build.entrypoints)
            .with_target(project.build.target)
        )
        output = opa.build(bundle_path, args)
        return BuildOutcome(bundle_path=bundle_path, output=output)

    def list_sources(
        self,
        path: str | Path = ".",
        *,
        include_test_dirs: bool = False,
        include_dependency_tests: bool = False,
        update: bool = True,
    ) -> List[Path]:
        project = self._prepare(path, update)
        locations = self._data_locations(project)
        if include_test_dirs:
            try:
                locations.extend(project.test_locations(include_dependency_tests))
            except OdmError as exc:
                raise OdmError(f"error getting test data locations: {exc}") from exc
        return locations

    def dependency_tree(self, path: str | Path = ".", *, update: bool = True) -> str:
        project = self._prepare(path, update)
        return format_tree(project)

    @staticmethod
    def bundle_path(project: Project) -> Path:
        """Where ``build`` writes the bundle: ``build.output`` or ``build/bundle.tar.gz``."""
        output = project.build.output
        if not output or output.endswith(("/", "\\")):
            directory = output or DEFAULT_BUILD_DIR
            return project.root / directory / DEFAULT_BUNDLE_FILE
        return project.root / output

    # ------------------------------------------------------------------
    # Helpers

    def _prepare(self, path: str | Path, update: bool) -> Project:
        if update:
            return self.run_update(path)
        return self.load_project(path, allow_missing=True)

    def _data_locations(self, project: Project) -> List[Path]:
        try:
            return project.data_locations()
        except OdmError as exc:
            raise OdmError(f"error getting data locations: {exc}") from exc


__all__ = ["BuildOutcome", "Orchestrator"]
