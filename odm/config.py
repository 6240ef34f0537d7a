"""Process-level settings for odm, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class Settings:
    """Locations of the external tools odm drives."""

    opa_path: str = "opa"
    git_path: str = "git"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``OPA_PATH`` and ``ODM_GIT_PATH``."""
    env = os.environ if environ is None else environ
    return Settings(
        opa_path=_as_str(env.get("OPA_PATH")) or "opa",
        git_path=_as_str(env.get("ODM_GIT_PATH")) or "git",
    )


def _as_str(value: object) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


__all__ = ["Settings", "load_settings"]
