"""Error types raised while reading manifests and resolving dependencies."""

from __future__ import annotations


class OdmError(RuntimeError):
    """Base class for every failure odm reports to the user."""


class ManifestNotFoundError(OdmError):
    """Raised when an ``opa.project`` file is required but absent."""


class ManifestParseError(OdmError):
    """Raised when a manifest cannot be parsed into a project."""


class UnsupportedLocationError(OdmError):
    """Raised when a location matches no scheme and no repository library."""


class MalformedLocationError(OdmError):
    """Raised when a location string is recognised but invalid."""


class SourceNotFoundError(OdmError):
    """Raised when a local dependency points at a missing path."""


class MissingRepositoryManifestError(OdmError):
    """Raised when a fetched repository has no ``repository.yaml``."""


class FileSystemError(OdmError):
    """Raised when creating, removing or copying files fails."""

    def __init__(self, message: str, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class CommandError(OdmError):
    """Raised when an external tool (git, opa) exits unsuccessfully."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class DependencyError(OdmError):
    """Wraps a failure with the name of the dependency being processed."""


class RepositoryError(OdmError):
    """Wraps a failure with the location of the repository being processed."""


__all__ = [
    "CommandError",
    "DependencyError",
    "FileSystemError",
    "MalformedLocationError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "MissingRepositoryManifestError",
    "OdmError",
    "RepositoryError",
    "SourceNotFoundError",
    "UnsupportedLocationError",
]
