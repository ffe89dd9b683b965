"""Domain port definitions for adapters."""

from __future__ import annotations

from .remote import (
    ChannelAdminService,
    DirectoryService,
    ImportJobService,
    PluginService,
    ProfileAttributeService,
    ReleaseLookup,
    RemoteService,
    RemoteServiceError,
    UploadService,
)

__all__ = [
    "ChannelAdminService",
    "DirectoryService",
    "ImportJobService",
    "PluginService",
    "ProfileAttributeService",
    "ReleaseLookup",
    "RemoteService",
    "RemoteServiceError",
    "UploadService",
]
