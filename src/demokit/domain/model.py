"""Value objects describing remote server state seen by the import pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class JobStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    ERROR = "error"
    CANCELED = "canceled"


class MembershipOutcome(StrEnum):
    ADDED = "added"
    ALREADY_MEMBER = "already_member"


@dataclass(slots=True, frozen=True)
class RemoteUser:
    id: str
    username: str


@dataclass(slots=True, frozen=True)
class RemoteTeam:
    id: str
    name: str


@dataclass(slots=True, frozen=True)
class RemoteChannel:
    id: str
    name: str
    team_id: str


@dataclass(slots=True, frozen=True)
class UploadSession:
    id: str
    filename: str
    file_size: int
    user_id: str
    file_offset: int = 0


@dataclass(slots=True, frozen=True)
class ImportJob:
    """Snapshot of an asynchronous server job.

    ``status`` is kept as the raw string so unknown values reported by the server
    survive until the job driver inspects them.
    """

    id: str
    status: str
    error_detail: str | None = None
    data: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(slots=True, frozen=True)
class ChannelAction:
    id: str
    action_type: str
    trigger_type: str
    enabled: bool = True
    payload: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(slots=True, frozen=True)
class ChannelBanner:
    text: str
    background_color: str
    enabled: bool = True


@dataclass(slots=True, frozen=True)
class CustomProfileField:
    id: str
    name: str
    type: str


@dataclass(slots=True, frozen=True)
class InstalledPlugin:
    id: str
    name: str | None = None
    version: str | None = None
    active: bool = False


@dataclass(slots=True, frozen=True)
class PluginRelease:
    repository: str
    tag: str
    asset_name: str
    download_url: str
