"""Content-addressed directory names for dependencies and repositories."""

from __future__ import annotations

import hashlib


def dependency_id(namespace: str, location: str) -> str:
    """Return the directory name for a dependency at ``location`` under ``namespace``."""
    cleartext = f"{namespace}:{location}"
    return hashlib.sha256(cleartext.encode("utf-8")).hexdigest()


def repository_id(location: str) -> str:
    """Return the directory name for a repository; repositories carry no namespace."""
    return hashlib.sha256(location.encode("utf-8")).hexdigest()


__all__ = ["dependency_id", "repository_id"]
