"""Mattermost REST API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from demokit.adapters.http_resilience import ResilientClient
from demokit.domain.model import (
    ChannelAction,
    CustomProfileField,
    ImportJob,
    InstalledPlugin,
    MembershipOutcome,
    RemoteChannel,
    RemoteTeam,
    RemoteUser,
    UploadSession,
)
from demokit.domain.ports import RemoteServiceError

from .schema import (
    AppError,
    ChannelActionPayload,
    ChannelPayload,
    CustomProfileFieldPayload,
    JobPayload,
    PluginManifest,
    PluginStatuses,
    TeamPayload,
    UploadSessionPayload,
    UserPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from demokit.config.http_resilience import ResilienceConfig
    from demokit.config.mattermost import MattermostConfig
    from demokit.domain.model import ChannelBanner

log = getLogger(__name__)

API_PREFIX = "/api/v4"
PLAYBOOKS_ACTIONS_PATH = "/plugins/playbooks/api/v0/actions/channels"
IMPORT_JOB_TYPE = "import_process"
IMPORT_UPLOAD_TYPE = "import"


class MattermostAPIError(RemoteServiceError):
    """Raised when the Mattermost API rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_id: str | None = None,
        detailed_error: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, error_id=error_id)
        self.detailed_error = detailed_error


def _raise_for_error(response: httpx.Response, *, method: str, path: str) -> None:
    if response.is_success:
        return
    try:
        error = AppError.model_validate(response.json())
    except (ValueError, ValidationError):
        error = AppError(message=response.text.strip() or response.reason_phrase)
    message = f"{method} {path} returned {response.status_code}: {error.message}"
    if error.detailed_error:
        message = f"{message} ({error.detailed_error})"
    log.debug("Mattermost error %s: %s", error.error_id, message)
    raise MattermostAPIError(
        message,
        status_code=response.status_code,
        error_id=error.error_id,
        detailed_error=error.detailed_error,
    )


def _parse[TModel: BaseModel](model: type[TModel], response: httpx.Response) -> TModel:
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise MattermostAPIError(
            f"Unexpected Mattermost response for {response.request.url.path}: {exc}",
            status_code=response.status_code,
        ) from exc


def _parse_list[TModel: BaseModel](model: type[TModel], response: httpx.Response) -> list[TModel]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise MattermostAPIError(
            f"Unexpected Mattermost response for {response.request.url.path}: {exc}",
            status_code=response.status_code,
        ) from exc
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MattermostAPIError(
            f"Expected a list from {response.request.url.path}",
            status_code=response.status_code,
        )
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise MattermostAPIError(
            f"Unexpected Mattermost response for {response.request.url.path}: {exc}",
            status_code=response.status_code,
        ) from exc


class MattermostClient:
    """Synchronous facade over the Mattermost REST API.

    Every call opens a short-lived ``ResilientClient``. With admin credentials the
    session token is obtained on first use and reused afterwards.
    """

    def __init__(
        self,
        *,
        config: MattermostConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._token = config.token

    # identity and uploads

    def get_current_user(self) -> RemoteUser:
        user = _parse(UserPayload, self._call("GET", f"{API_PREFIX}/users/me"))
        return RemoteUser(id=user.id, username=user.username)

    def create_upload_session(
        self, *, filename: str, file_size: int, user_id: str
    ) -> UploadSession:
        response = self._call(
            "POST",
            f"{API_PREFIX}/uploads",
            json={
                "type": IMPORT_UPLOAD_TYPE,
                "filename": filename,
                "file_size": file_size,
                "user_id": user_id,
            },
        )
        session = _parse(UploadSessionPayload, response)
        return UploadSession(
            id=session.id,
            filename=session.filename,
            file_size=session.file_size,
            user_id=session.user_id,
            file_offset=session.file_offset,
        )

    def upload_data(self, session_id: str, data: bytes) -> None:
        # 204 while the session is incomplete, 201 with the file info once done.
        self._call(
            "POST",
            f"{API_PREFIX}/uploads/{session_id}",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )

    # jobs

    def create_import_job(self, import_file: str) -> ImportJob:
        response = self._call(
            "POST",
            f"{API_PREFIX}/jobs",
            json={"type": IMPORT_JOB_TYPE, "data": {"import_file": import_file}},
        )
        return self._to_job(_parse(JobPayload, response))

    def get_job(self, job_id: str) -> ImportJob:
        return self._to_job(_parse(JobPayload, self._call("GET", f"{API_PREFIX}/jobs/{job_id}")))

    # directory

    def get_team_by_name(self, name: str) -> RemoteTeam:
        team = _parse(TeamPayload, self._call("GET", f"{API_PREFIX}/teams/name/{name}"))
        return RemoteTeam(id=team.id, name=team.name)

    def get_channel_by_name(self, team_id: str, name: str) -> RemoteChannel:
        response = self._call("GET", f"{API_PREFIX}/teams/{team_id}/channels/name/{name}")
        channel = _parse(ChannelPayload, response)
        return RemoteChannel(id=channel.id, name=channel.name, team_id=channel.team_id or team_id)

    def get_user_by_username(self, username: str) -> RemoteUser:
        user = _parse(UserPayload, self._call("GET", f"{API_PREFIX}/users/username/{username}"))
        return RemoteUser(id=user.id, username=user.username)

    def add_channel_member(self, channel_id: str, user_id: str) -> MembershipOutcome:
        try:
            self._call(
                "POST",
                f"{API_PREFIX}/channels/{channel_id}/members",
                json={"user_id": user_id},
            )
        except MattermostAPIError as exc:
            if exc.indicates_existing:
                return MembershipOutcome.ALREADY_MEMBER
            raise
        return MembershipOutcome.ADDED

    # channel administration

    def list_channel_actions(self, channel_id: str) -> list[ChannelAction]:
        response = self._call("GET", f"{PLAYBOOKS_ACTIONS_PATH}/{channel_id}")
        return [self._to_action(item) for item in _parse_list(ChannelActionPayload, response)]

    def create_channel_action(
        self,
        channel_id: str,
        *,
        action_type: str,
        trigger_type: str,
        payload: Mapping[str, Any],
    ) -> ChannelAction:
        body = {
            "channel_id": channel_id,
            "enabled": True,
            "action_type": action_type,
            "trigger_type": trigger_type,
            "payload": dict(payload),
        }
        response = self._call("POST", f"{PLAYBOOKS_ACTIONS_PATH}/{channel_id}", json=body)
        try:
            action_id = str(response.json().get("id", ""))
        except (ValueError, AttributeError):
            action_id = ""
        return ChannelAction(
            id=action_id,
            action_type=action_type,
            trigger_type=trigger_type,
            payload=dict(payload),
        )

    def update_channel_banner(self, channel_id: str, banner: ChannelBanner) -> None:
        self._call(
            "PUT",
            f"{API_PREFIX}/channels/{channel_id}/patch",
            json={
                "banner_info": {
                    "text": banner.text,
                    "background_color": banner.background_color,
                    "enabled": banner.enabled,
                }
            },
        )

    def execute_command(self, channel_id: str, command: str) -> None:
        self._call(
            "POST",
            f"{API_PREFIX}/commands/execute",
            json={"channel_id": channel_id, "command": command},
        )

    # plugins

    def list_installed_plugins(self) -> list[InstalledPlugin]:
        statuses = _parse(PluginStatuses, self._call("GET", f"{API_PREFIX}/plugins"))
        return [
            *(self._to_plugin(item, active=True) for item in statuses.active or ()),
            *(self._to_plugin(item, active=False) for item in statuses.inactive or ()),
        ]

    def install_plugin_from_url(self, url: str, *, force: bool) -> InstalledPlugin:
        response = self._call(
            "POST",
            f"{API_PREFIX}/plugins/install_from_url",
            params={"plugin_download_url": url, "force": "true" if force else "false"},
        )
        return self._to_plugin(_parse(PluginManifest, response), active=False)

    def upload_plugin(self, bundle: Path, *, force: bool) -> InstalledPlugin:
        response = self._call(
            "POST",
            f"{API_PREFIX}/plugins",
            files={"plugin": (bundle.name, bundle.read_bytes(), "application/gzip")},
            data={"force": "true" if force else "false"},
        )
        return self._to_plugin(_parse(PluginManifest, response), active=False)

    def enable_plugin(self, plugin_id: str) -> None:
        self._call("POST", f"{API_PREFIX}/plugins/{plugin_id}/enable")

    # custom profile attributes

    def list_profile_fields(self) -> list[CustomProfileField]:
        response = self._call("GET", f"{API_PREFIX}/custom_profile_attributes/fields")
        return [
            CustomProfileField(id=item.id, name=item.name, type=item.type)
            for item in _parse_list(CustomProfileFieldPayload, response)
        ]

    def create_profile_field(self, definition: Mapping[str, Any]) -> CustomProfileField:
        response = self._call(
            "POST",
            f"{API_PREFIX}/custom_profile_attributes/fields",
            json=dict(definition),
        )
        field = _parse(CustomProfileFieldPayload, response)
        return CustomProfileField(id=field.id, name=field.name, type=field.type)

    def update_user_profile_attributes(self, user_id: str, values: Mapping[str, str]) -> None:
        self._call(
            "PATCH",
            f"{API_PREFIX}/users/{user_id}/custom_profile_attributes",
            json=dict(values),
        )

    # plumbing

    def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return asyncio.run(self._call_async(method, path, **kwargs))

    async def _call_async(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        async with self._client_factory(self._resilience) as client:
            headers = dict(kwargs.pop("headers", None) or {})
            headers["Authorization"] = f"Bearer {await self._ensure_token(client)}"
            try:
                response = await client.request(method, path, headers=headers, **kwargs)
            except httpx.HTTPError as exc:
                raise MattermostAPIError(f"{method} {path} failed: {exc}") from exc
        _raise_for_error(response, method=method, path=path)
        return response

    async def _ensure_token(self, client: ResilientClient) -> str:
        if self._token is not None:
            return self._token

        path = f"{API_PREFIX}/users/login"
        try:
            response = await client.post(
                path,
                json={"login_id": self._config.username, "password": self._config.password},
            )
        except httpx.HTTPError as exc:
            raise MattermostAPIError(f"POST {path} failed: {exc}") from exc
        _raise_for_error(response, method="POST", path=path)

        token = response.headers.get("Token")
        if not token:
            raise MattermostAPIError("Mattermost login succeeded without a session token")
        log.info("Logged in to %s as %s", self._config.server_url, self._config.username)
        self._token = token
        return token

    @staticmethod
    def _to_job(job: JobPayload) -> ImportJob:
        return ImportJob(
            id=job.id,
            status=job.status,
            error_detail=job.error_detail,
            data=dict(job.data or {}),
        )

    @staticmethod
    def _to_action(action: ChannelActionPayload) -> ChannelAction:
        return ChannelAction(
            id=action.id,
            action_type=action.action_type,
            trigger_type=action.trigger_type,
            enabled=action.enabled,
            payload=dict(action.payload),
        )

    @staticmethod
    def _to_plugin(manifest: PluginManifest, *, active: bool) -> InstalledPlugin:
        return InstalledPlugin(
            id=manifest.id,
            name=manifest.name,
            version=manifest.version,
            active=active,
        )
