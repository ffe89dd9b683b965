"""Mattermost adapter."""

from __future__ import annotations

from .client import MattermostAPIError, MattermostClient

__all__ = ["MattermostAPIError", "MattermostClient"]
