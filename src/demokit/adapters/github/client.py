"""GitHub client resolving plugin bundles from the latest release."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from demokit.adapters.http_resilience import ResilientClient
from demokit.domain.model import PluginRelease
from demokit.domain.ports import RemoteServiceError

from .schema import ErrorResponse, Release

if TYPE_CHECKING:
    from collections.abc import Callable

    from demokit.config.github import GitHubConfig
    from demokit.config.http_resilience import ResilienceConfig

    from .schema import ReleaseAsset

log = getLogger(__name__)

BUNDLE_SUFFIX = ".tar.gz"
PLATFORM_MARKERS = ("linux", "darwin", "windows")


class GitHubAPIError(RemoteServiceError):
    """Raised when GitHub cannot provide a usable plugin release."""


def select_bundle_asset(release: Release, plugin_id: str) -> ReleaseAsset:
    """Pick the platform independent bundle, preferring one named after the plugin."""

    bundles = [
        asset
        for asset in release.assets
        if asset.name.endswith(BUNDLE_SUFFIX)
        and not any(marker in asset.name for marker in PLATFORM_MARKERS)
    ]
    if not bundles:
        raise GitHubAPIError(
            f"release {release.tag_name} has no {BUNDLE_SUFFIX} asset for plugin {plugin_id}"
        )
    return next((asset for asset in bundles if plugin_id in asset.name), bundles[0])


class GitHubReleaseClient:
    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def latest_plugin_release(self, repository: str, plugin_id: str) -> PluginRelease:
        return asyncio.run(self._latest_plugin_release_async(repository, plugin_id))

    async def _latest_plugin_release_async(
        self, repository: str, plugin_id: str
    ) -> PluginRelease:
        path = f"/repos/{repository.strip('/')}/releases/latest"
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(path)
            except httpx.HTTPError as exc:
                raise GitHubAPIError(f"GET {path} failed: {exc}") from exc

        if not response.is_success:
            try:
                message = ErrorResponse.model_validate(response.json()).message
            except (ValueError, ValidationError):
                message = response.reason_phrase
            raise GitHubAPIError(
                f"GitHub release lookup for {repository} failed: {message}",
                status_code=response.status_code,
            )

        try:
            release = Release.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GitHubAPIError(f"Unexpected GitHub release payload for {repository}") from exc

        asset = select_bundle_asset(release, plugin_id)
        log.debug("Resolved %s %s to %s", repository, release.tag_name, asset.name)
        return PluginRelease(
            repository=repository,
            tag=release.tag_name,
            asset_name=asset.name,
            download_url=asset.download_url,
        )
