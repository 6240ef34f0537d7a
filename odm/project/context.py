"""State threaded through a single update or load run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ..config import Settings, load_settings
from ..engine.opa import Opa
from ..git.fetch import GitFetcher
from ..logging import get_logger
from ..process import Runner, run_command


@dataclass
class ResolveContext:
    """Collaborators used while resolving a dependency tree."""

    git: GitFetcher
    opa_executable: str = "opa"
    opa_runner: Runner = field(default=run_command, repr=False)
    logger: logging.Logger = field(default_factory=lambda: get_logger("resolve"))

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        git_runner: Runner | None = None,
        opa_runner: Runner | None = None,
        logger: logging.Logger | None = None,
    ) -> "ResolveContext":
        settings = settings or load_settings()
        return cls(
            git=GitFetcher(git_runner, executable=settings.git_path),
            opa_executable=settings.opa_path,
            opa_runner=opa_runner or run_command,
            logger=logger or get_logger("resolve"),
        )

    def opa(self, data_locations: Sequence[Path | str]) -> Opa:
        return Opa.create(data_locations, executable=self.opa_executable, runner=self.opa_runner)


__all__ = ["ResolveContext"]
