"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from demokit.adapters.github import GitHubReleaseClient
from demokit.adapters.mattermost import MattermostClient
from demokit.config import (
    get_github_config,
    get_import_settings,
    get_mattermost_config,
    resolve_source_path,
)
from demokit.domain.import_pipeline import PipelineContext, build_import_pipeline

if TYPE_CHECKING:
    from pathlib import Path

    from demokit.config import ImportSettings
    from demokit.domain.import_pipeline import ImportRunResult
    from demokit.domain.ports import ReleaseLookup, RemoteService

log = getLogger(__name__)


def run_bulk_import(
    *,
    source_path: str | Path | None = None,
    settings: ImportSettings | None = None,
    remote: RemoteService | None = None,
    releases: ReleaseLookup | None = None,
    force_plugins: bool = False,
    force_github_plugins: bool = False,
) -> ImportRunResult:
    """Replay a bulk import file into the configured Mattermost server."""

    path = resolve_source_path(source_path)
    effective_settings = settings or get_import_settings()
    effective_remote = remote or MattermostClient(config=get_mattermost_config())
    effective_releases = releases or GitHubReleaseClient(config=get_github_config())
    log.info(
        "Starting bulk import: source=%s, force_plugins=%s, force_github_plugins=%s",
        path,
        force_plugins,
        force_github_plugins,
    )

    pipeline = build_import_pipeline(
        effective_remote,
        settings=effective_settings,
        releases=effective_releases,
        force_plugins=force_plugins,
        force_github_plugins=force_github_plugins,
    )
    result = pipeline.run(PipelineContext(source_path=path))

    log.info(
        "Finished bulk import: phases=%d, errors=%d, jobs=%d",
        len(result.phases),
        result.errors,
        sum(1 for phase in result.phases if phase.job_id),
    )
    return result
