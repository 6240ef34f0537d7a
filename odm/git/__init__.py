"""Version-control helpers."""

from .fetch import GitFetcher, parse_git_url

__all__ = ["GitFetcher", "parse_git_url"]
