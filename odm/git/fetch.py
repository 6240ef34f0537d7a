"""Git fetching utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple

from ..errors import CommandError, MalformedLocationError
from ..logging import get_logger
from ..process import Runner, run_command


def parse_git_url(location: str) -> Tuple[str, Optional[str]]:
    """Split ``git+<url>[#tag]`` into the clone URL and the optional tag."""
    trimmed = location[len("git+"):] if location.startswith("git+") else location
    parts = trimmed.split("#")
    if len(parts) > 2:
        raise MalformedLocationError(
            f"invalid git url {location}; only one tag separator '#' allowed"
        )
    url = parts[0]
    if not url:
        raise MalformedLocationError(f"invalid git url {location}; missing repository url")
    tag = parts[1] if len(parts) == 2 and parts[1] else None
    return url, tag


class GitFetcher:
    """Clones repositories into target directories."""

    def __init__(self, runner: Runner | None = None, *, executable: str = "git") -> None:
        self._runner = runner or run_command
        self._executable = executable
        self.logger = get_logger("git")

    def clone(self, url: str, target_dir: Path, *, tag: str | None = None) -> None:
        """Clone ``url`` into ``target_dir`` and check out ``tag`` when given."""
        self.logger.debug("Cloning %s into %s", url, target_dir)
        try:
            self._run(["clone", "--quiet", url, str(target_dir)], cwd=target_dir.parent)
        except CommandError as exc:
            raise CommandError(
                f"failed to clone git repository {url}: {exc}", exc.output
            ) from exc

        if tag is None:
            self.logger.debug("No tag specified, using HEAD")
            return

        try:
            self._run(
                ["-c", "advice.detachedHead=false", "checkout", "--quiet", f"refs/tags/{tag}"],
                cwd=target_dir,
            )
        except CommandError as exc:
            raise CommandError(
                f"failed to checkout tag '{tag}' for git repository {url}: {exc}",
                exc.output,
            ) from exc

    # ------------------------------------------------------------------
    # Helpers

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        return self._runner([self._executable, *args], cwd=cwd)


__all__ = ["GitFetcher", "parse_git_url"]
