"""GitHub release lookup adapter."""

from __future__ import annotations

from .client import GitHubAPIError, GitHubReleaseClient

__all__ = ["GitHubAPIError", "GitHubReleaseClient"]
