"""Ports describing the remote collaboration server and release hosting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from demokit.domain.model import (
        ChannelAction,
        ChannelBanner,
        CustomProfileField,
        ImportJob,
        InstalledPlugin,
        MembershipOutcome,
        PluginRelease,
        RemoteChannel,
        RemoteTeam,
        RemoteUser,
        UploadSession,
    )


class RemoteServiceError(RuntimeError):
    """Raised by adapters when a remote call fails."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_id = error_id

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def indicates_existing(self) -> bool:
        """Whether the failure means the requested entity is already there."""

        if self.status_code == 409:
            return True
        haystack = f"{self.error_id or ''} {self}".lower()
        return "already" in haystack or "exists" in haystack


@runtime_checkable
class UploadService(Protocol):
    def get_current_user(self) -> RemoteUser: ...

    def create_upload_session(
        self, *, filename: str, file_size: int, user_id: str
    ) -> UploadSession: ...

    def upload_data(self, session_id: str, data: bytes) -> None: ...


@runtime_checkable
class ImportJobService(Protocol):
    def create_import_job(self, import_file: str) -> ImportJob: ...

    def get_job(self, job_id: str) -> ImportJob: ...


@runtime_checkable
class DirectoryService(Protocol):
    def get_team_by_name(self, name: str) -> RemoteTeam: ...

    def get_channel_by_name(self, team_id: str, name: str) -> RemoteChannel: ...

    def get_user_by_username(self, username: str) -> RemoteUser: ...

    def add_channel_member(self, channel_id: str, user_id: str) -> MembershipOutcome: ...


@runtime_checkable
class ChannelAdminService(Protocol):
    def list_channel_actions(self, channel_id: str) -> list[ChannelAction]: ...

    def create_channel_action(
        self,
        channel_id: str,
        *,
        action_type: str,
        trigger_type: str,
        payload: Mapping[str, Any],
    ) -> ChannelAction: ...

    def update_channel_banner(self, channel_id: str, banner: ChannelBanner) -> None: ...

    def execute_command(self, channel_id: str, command: str) -> None: ...


@runtime_checkable
class PluginService(Protocol):
    def list_installed_plugins(self) -> list[InstalledPlugin]: ...

    def install_plugin_from_url(self, url: str, *, force: bool) -> InstalledPlugin: ...

    def upload_plugin(self, bundle: Path, *, force: bool) -> InstalledPlugin: ...

    def enable_plugin(self, plugin_id: str) -> None: ...


@runtime_checkable
class ProfileAttributeService(Protocol):
    def list_profile_fields(self) -> list[CustomProfileField]: ...

    def create_profile_field(self, definition: Mapping[str, Any]) -> CustomProfileField: ...

    def update_user_profile_attributes(self, user_id: str, values: Mapping[str, str]) -> None: ...


@runtime_checkable
class RemoteService(
    UploadService,
    ImportJobService,
    DirectoryService,
    ChannelAdminService,
    PluginService,
    ProfileAttributeService,
    Protocol,
):
    """Everything the import pipeline needs from the collaboration server."""


@runtime_checkable
class ReleaseLookup(Protocol):
    def latest_plugin_release(self, repository: str, plugin_id: str) -> PluginRelease: ...


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
