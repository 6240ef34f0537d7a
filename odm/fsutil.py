"""Filesystem helpers for materializing dependency content."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List, Sequence
from urllib.parse import urlparse

from .errors import FileSystemError, SourceNotFoundError
from .logging import get_logger

_LOGGER = get_logger("fsutil")


def normalize_file_path(path: str) -> str:
    """Turn a ``file:`` location or path into a filesystem path.

    ``file://host/p`` and ``file:///p`` become absolute paths, ``file:/p`` and
    ``file:p`` are relative to the project root, anything else is returned
    unchanged.
    """
    if path.startswith("file://"):
        parsed = urlparse(path)
        if parsed.netloc:
            return f"/{parsed.netloc}{parsed.path}"
        return parsed.path or "/"
    if path.startswith("file:/"):
        return path[len("file:/"):]
    if path.startswith("file:"):
        return path[len("file:"):]
    return path


def resolve_path(root: Path, path: str) -> Path:
    """Resolve ``path`` (possibly a ``file:`` URI) against ``root``."""
    candidate = Path(normalize_file_path(path))
    if not candidate.is_absolute():
        candidate = root / candidate
    return candidate


def filter_existing(paths: Iterable[Path]) -> List[Path]:
    return [path for path in paths if path.exists()]


def reset_dir(path: Path) -> None:
    """Delete ``path`` recursively if present and recreate it empty."""
    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
    except OSError as exc:
        raise FileSystemError(f"failed to reset directory {path}: {exc}", path) from exc


def make_dir(path: Path) -> None:
    """Create ``path`` if missing; an existing non-directory is an error."""
    if path.exists():
        if not path.is_dir():
            raise FileSystemError(f"'{path.resolve()}' is not a directory", path)
        return
    try:
        path.mkdir(parents=True)
    except OSError as exc:
        raise FileSystemError(f"failed to create directory {path}: {exc}", path) from exc


def copy_tree(
    source: Path,
    target_dir: Path,
    *,
    exclude: Sequence[str] = (),
    skip_empty: bool = False,
) -> None:
    """Copy ``source`` (a file or directory) into ``target_dir``.

    Entries whose name is listed in ``exclude`` are skipped at every level.
    With ``skip_empty`` zero-length files are not copied; an empty policy
    module makes ``opa refactor`` fail.
    """
    if not source.exists():
        raise SourceNotFoundError(f"source file/directory {source} does not exist")
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileSystemError(f"failed to create destination directory {target_dir}: {exc}", target_dir) from exc

    if source.is_dir():
        _LOGGER.debug("Copying directory %s to %s", source, target_dir)
        try:
            children = sorted(source.iterdir())
        except OSError as exc:
            raise FileSystemError(f"failed to read directory {source}: {exc}", source) from exc
        for child in children:
            if child.name in exclude:
                _LOGGER.debug("Skipping excluded entry %s", child)
                continue
            destination = target_dir / child.name if child.is_dir() else target_dir
            copy_tree(child, destination, exclude=exclude, skip_empty=skip_empty)
        return

    destination = target_dir / source.name
    try:
        if skip_empty and source.stat().st_size == 0:
            _LOGGER.debug("Skipping empty file %s", source)
            return
        shutil.copyfile(source, destination)
    except OSError as exc:
        raise FileSystemError(f"failed to copy file {source}: {exc}", source) from exc


__all__ = [
    "copy_tree",
    "filter_existing",
    "make_dir",
    "normalize_file_path",
    "reset_dir",
    "resolve_path",
]
