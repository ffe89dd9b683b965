"""Pydantic models describing the Mattermost REST API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MattermostBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AppError(MattermostBaseModel):
    error_id: str | None = Field(default=None, alias="id")
    message: str = ""
    detailed_error: str | None = None
    status_code: int | None = None


class UserPayload(MattermostBaseModel):
    id: str
    username: str


class TeamPayload(MattermostBaseModel):
    id: str
    name: str


class ChannelPayload(MattermostBaseModel):
    id: str
    name: str
    team_id: str = ""


class UploadSessionPayload(MattermostBaseModel):
    id: str
    filename: str
    file_size: int
    user_id: str
    file_offset: int = 0
    upload_type: str | None = Field(default=None, alias="type")


class JobPayload(MattermostBaseModel):
    id: str
    job_type: str | None = Field(default=None, alias="type")
    status: str
    progress: int | None = None
    data: dict[str, Any] | None = None

    @property
    def error_detail(self) -> str | None:
        if not self.data:
            return None
        error = self.data.get("error")
        return str(error) if error else None


class ChannelActionPayload(MattermostBaseModel):
    id: str = ""
    action_type: str
    trigger_type: str = ""
    enabled: bool = True
    payload: dict[str, Any] = Field(default_factory=dict[str, Any])


class CustomProfileFieldPayload(MattermostBaseModel):
    id: str
    name: str
    type: str = "text"


class PluginManifest(MattermostBaseModel):
    id: str
    name: str | None = None
    version: str | None = None


class PluginStatuses(MattermostBaseModel):
    active: list[PluginManifest] | None = None
    inactive: list[PluginManifest] | None = None
