"""GitHub release lookup configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_GITHUB_API_URL = "https://api.github.com"
RELEASE_CACHE_TTL_SECONDS = 15 * 60


def release_has_assets(payload: object) -> bool:
    """Only cache releases whose assets are already attached.

    Release workflows publish the tag first and upload bundles afterwards.
    """

    if not isinstance(payload, dict):
        return False
    return bool(payload.get("assets"))


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    resilience: ResilienceConfig
    token: str | None = None


def get_github_config() -> GitHubConfig:
    token = optional_env_var("GITHUB_TOKEN")
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"

    resilience = ResilienceConfig(
        name="github",
        base_url=optional_env_var("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        retry=RetryPolicy(total=4),
        cache=CacheConfig(
            enabled=True,
            backend="sqlite",
            default_ttl_seconds=RELEASE_CACHE_TTL_SECONDS,
            should_cache=release_has_assets,
        ),
        default_headers=headers,
    )
    return GitHubConfig(resilience=resilience, token=token)
