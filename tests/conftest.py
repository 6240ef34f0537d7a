from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from odm.git.fetch import GitFetcher
from odm.project import ResolveContext
from tests._fixtures.fake_tools import FakeGitRunner, FakeOpaRunner
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def opa_runner() -> FakeOpaRunner:
    return FakeOpaRunner()


@pytest.fixture
def git_runner() -> FakeGitRunner:
    return FakeGitRunner()


@pytest.fixture
def context(opa_runner: FakeOpaRunner, git_runner: FakeGitRunner) -> ResolveContext:
    """A resolve context wired to the recording git and opa fakes."""
    return ResolveContext(git=GitFetcher(git_runner), opa_runner=opa_runner)


@pytest.fixture(autouse=True)
def reset_odm_logger() -> Iterator[None]:
    """Drop handlers the CLI installs so they never outlive a captured stream."""
    yield
    logger = logging.getLogger("odm")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
