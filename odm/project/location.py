"""Typed references to dependency content."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..errors import MalformedLocationError, SourceNotFoundError, UnsupportedLocationError
from ..fsutil import copy_tree, resolve_path
from ..git.fetch import parse_git_url
from .constants import DOT_OPA_DIR, MANIFEST_FILENAME
from .context import ResolveContext


class LocationKind(str, Enum):
    LOCAL = "local"
    GIT = "git"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Location:
    """A location string classified once, when it is read.

    ``raw`` is the string exactly as declared; it feeds directory ids and is
    what gets written back to manifests.
    """

    raw: str
    kind: LocationKind
    url: Optional[str] = None
    tag: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "Location":
        value = raw.strip()
        if value.startswith("file:"):
            return cls(raw=value, kind=LocationKind.LOCAL)
        if value.startswith("git+") or value.startswith("git:"):
            url, tag = parse_git_url(value)
            return cls(raw=value, kind=LocationKind.GIT, url=url, tag=tag)
        return cls(raw=value, kind=LocationKind.UNRESOLVED)

    def __str__(self) -> str:
        return self.raw

    @property
    def is_local(self) -> bool:
        return self.kind is LocationKind.LOCAL

    @property
    def is_git(self) -> bool:
        return self.kind is LocationKind.GIT

    @property
    def is_supported(self) -> bool:
        return self.kind is not LocationKind.UNRESOLVED

    def local_source(self, root_dir: Path) -> Path:
        """Return the directory a local location copies from."""
        source = resolve_path(root_dir, self.raw)
        if not source.exists():
            raise SourceNotFoundError(f"source dir {source} does not exist")
        if source.is_file() and source.name == MANIFEST_FILENAME:
            source = source.parent
        return source

    def materialize(self, root_dir: Path, target_dir: Path, context: ResolveContext) -> None:
        """Fetch or copy this location's content into ``target_dir``."""
        if self.is_local:
            source = self.local_source(root_dir)
            context.logger.debug("Copying %s to %s", source, target_dir)
            copy_tree(source, target_dir, exclude=(DOT_OPA_DIR,), skip_empty=True)
        elif self.is_git:
            if not self.url:
                raise MalformedLocationError(f"git location {self.raw} has no repository url")
            context.git.clone(self.url, target_dir, tag=self.tag)
        else:
            raise UnsupportedLocationError(f"unsupported location type: {self.raw}")


__all__ = ["Location", "LocationKind"]
