"""Blocking subprocess execution shared by the git and OPA adapters."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable

from .errors import CommandError
from .logging import get_logger

Runner = Callable[..., str]

_LOGGER = get_logger("process")


def run_command(args: Iterable[str], *, cwd: Path | None = None) -> str:
    """Run ``args`` to completion and return stdout.

    On a non-zero exit a :class:`CommandError` is raised whose message is the
    captured stderr, or stdout when stderr is empty.
    """
    argv = list(args)
    _LOGGER.debug("Executing %s", " ".join(argv))
    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd is not None else None,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        raise CommandError(f"failed to execute {argv[0]}: {exc}") from exc
    if completed.returncode != 0:
        output = completed.stderr if completed.stderr else completed.stdout
        raise CommandError(output.strip() or f"{argv[0]} exited with status {completed.returncode}", output)
    return completed.stdout


__all__ = ["Runner", "run_command"]
