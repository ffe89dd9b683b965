"""Mattermost server connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .errors import MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_MATTERMOST_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class MattermostConfig:
    server_url: str
    resilience: ResilienceConfig
    token: str | None = None
    username: str | None = None
    password: str | None = None

    @property
    def uses_password_login(self) -> bool:
        return self.token is None


def get_mattermost_config() -> MattermostConfig:
    """Build the server configuration from ``MM_*`` environment variables.

    A personal access token (``MM_TOKEN``) wins over admin credentials; without a
    token both ``MM_ADMIN_USERNAME`` and ``MM_ADMIN_PASSWORD`` must be present.
    """

    server_url = require_env_vars(("MM_SERVER_URL",))["MM_SERVER_URL"].rstrip("/")
    token = optional_env_var("MM_TOKEN")
    username: str | None = None
    password: str | None = None
    if token is None:
        try:
            credentials = require_env_vars(("MM_ADMIN_USERNAME", "MM_ADMIN_PASSWORD"))
        except MissingConfigurationError as exc:
            raise MissingConfigurationError(f"{exc} (or set MM_TOKEN)") from exc
        username = credentials["MM_ADMIN_USERNAME"]
        password = credentials["MM_ADMIN_PASSWORD"]

    # Job polls and uploads must never be served from a cache.
    resilience = ResilienceConfig(
        name="mattermost",
        base_url=server_url,
        timeout_seconds=DEFAULT_MATTERMOST_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        cache=None,
        default_headers={"X-Requested-With": "XMLHttpRequest"},
    )

    return MattermostConfig(
        server_url=server_url,
        resilience=resilience,
        token=token,
        username=username,
        password=password,
    )
