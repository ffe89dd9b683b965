"""Pydantic models for the line-delimited bulk import source."""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RecordType(StrEnum):
    VERSION = "version"
    TEAM = "team"
    CHANNEL = "channel"
    USER = "user"
    POST = "post"
    CHANNEL_CATEGORY = "channel-category"
    CHANNEL_BANNER = "channel-banner"
    COMMAND = "command"
    PLUGIN = "plugin"
    USER_ATTRIBUTE = "user-attribute"
    USER_PROFILE = "user-profile"

    @property
    def is_custom(self) -> bool:
        return self in CUSTOM_RECORD_TYPES


# Handled by dedicated phases, never replayed through the server's bulk importer.
CUSTOM_RECORD_TYPES: Final[frozenset[RecordType]] = frozenset(
    {
        RecordType.CHANNEL_CATEGORY,
        RecordType.CHANNEL_BANNER,
        RecordType.COMMAND,
        RecordType.PLUGIN,
        RecordType.USER_ATTRIBUTE,
        RecordType.USER_PROFILE,
    }
)


class RecordProbe(BaseModel):
    """Type-only view of a line; everything else is ignored."""

    model_config = ConfigDict(extra="ignore")

    type: str


class RecordModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class VersionRecord(RecordModel):
    type: Literal["version"] = "version"
    version: int


class TeamPayload(RecordModel):
    name: str


class TeamRecord(RecordModel):
    type: Literal["team"] = "team"
    team: TeamPayload


class ChannelPayload(RecordModel):
    team: str
    name: str


class ChannelRecord(RecordModel):
    type: Literal["channel"] = "channel"
    channel: ChannelPayload


class UserChannelMembership(RecordModel):
    name: str | None = None
    roles: str | None = None


class UserTeamMembership(RecordModel):
    name: str | None = None
    roles: str | None = None
    channels: list[UserChannelMembership] | None = None


class UserPayload(RecordModel):
    username: str | None = None
    teams: list[UserTeamMembership] | None = None


class UserRecord(RecordModel):
    type: Literal["user"] = "user"
    user: UserPayload


class PostProps(RecordModel):
    start_at: int | None = None
    end_at: int | None = None


class PostReply(RecordModel):
    create_at: int | None = None


class PostPayload(RecordModel):
    create_at: int | None = None
    replies: list[PostReply] | None = None
    props: PostProps | None = None


class PostRecord(RecordModel):
    type: Literal["post"] = "post"
    post: PostPayload


class ChannelCategoryRecord(RecordModel):
    type: Literal["channel-category"] = "channel-category"
    team: str
    category: str
    channels: list[str] = Field(default_factory=list[str])


class BannerPayload(RecordModel):
    team: str
    channel: str
    text: str
    background_color: str = "#DDDDDD"
    enabled: bool = True


class ChannelBannerRecord(RecordModel):
    type: Literal["channel-banner"] = "channel-banner"
    banner: BannerPayload


class CommandPayload(RecordModel):
    team: str
    channel: str
    text: str


class CommandRecord(RecordModel):
    type: Literal["command"] = "command"
    command: CommandPayload


class PluginPayload(RecordModel):
    source: Literal["github", "local"]
    plugin_id: str
    name: str | None = None
    github_repo: str | None = None
    path: str | None = None
    force_install: bool = False

    @model_validator(mode="after")
    def _require_location(self) -> Self:
        if self.source == "github" and not self.github_repo:
            raise ValueError("github plugins require 'github_repo'")
        if self.source == "local" and not self.path:
            raise ValueError("local plugins require 'path'")
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.plugin_id


class PluginRecord(RecordModel):
    type: Literal["plugin"] = "plugin"
    plugin: PluginPayload


class AttributeOption(RecordModel):
    name: str
    color: str | None = None


class AttributePayload(RecordModel):
    name: str
    display_name: str | None = None
    type: str = "text"
    hide_when_empty: bool = False
    required: bool = False
    ldap: str | None = None
    saml: str | None = None
    options: list[AttributeOption] = Field(default_factory=list[AttributeOption])
    sort_order: int = 0
    value_type: str = ""
    visibility: str = "when_set"


class UserAttributeRecord(RecordModel):
    type: Literal["user-attribute"] = "user-attribute"
    attribute: AttributePayload


class UserProfileRecord(RecordModel):
    type: Literal["user-profile"] = "user-profile"
    user: str
    attributes: dict[str, str] = Field(default_factory=dict[str, str])


RECORD_MODELS: Final[dict[RecordType, type[RecordModel]]] = {
    RecordType.VERSION: VersionRecord,
    RecordType.TEAM: TeamRecord,
    RecordType.CHANNEL: ChannelRecord,
    RecordType.USER: UserRecord,
    RecordType.POST: PostRecord,
    RecordType.CHANNEL_CATEGORY: ChannelCategoryRecord,
    RecordType.CHANNEL_BANNER: ChannelBannerRecord,
    RecordType.COMMAND: CommandRecord,
    RecordType.PLUGIN: PluginRecord,
    RecordType.USER_ATTRIBUTE: UserAttributeRecord,
    RecordType.USER_PROFILE: UserProfileRecord,
}
