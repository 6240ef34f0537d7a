"""Policy engine adapters."""

from .opa import Opa

__all__ = ["Opa"]
