"""Assemble the standard import pipeline."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from demokit.config.importer import ImportSettings

from .banners import ChannelBannerPhase
from .bulk_phase import BulkImportPhase
from .categories import ChannelCategoryPhase
from .commands import CommandPhase
from .job_driver import JobDriver
from .memberships import ChannelMembershipPhase
from .orchestrator import ImportPipeline
from .plugins import PluginPhase
from .records import RecordType
from .transforms import ChannelMembershipExtractor, TimestampNormalizer, current_time_ms
from .upload import ArchiveUploader
from .user_attributes import UserAttributePhase

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from demokit.domain.ports import ReleaseLookup, RemoteService

    from .transforms import RecordTransform

PHASE_NAMES = (
    "infrastructure",
    "plugins",
    "channel-categories",
    "channel-banners",
    "commands",
    "users",
    "channel-memberships",
    "user-attributes",
    "posts",
)


def build_import_pipeline(
    remote: RemoteService,
    *,
    settings: ImportSettings | None = None,
    releases: ReleaseLookup | None = None,
    force_plugins: bool = False,
    force_github_plugins: bool = False,
    now_ms: Callable[[], int] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ImportPipeline:
    """Return the pipeline with its phases in ``PHASE_NAMES`` order."""

    config = settings or ImportSettings()
    uploader = ArchiveUploader(remote, chunk_size=config.upload_chunk_size)
    driver = JobDriver(
        remote,
        poll_interval=config.poll_interval,
        timeout=config.job_timeout,
        sleep=sleep,
        clock=clock,
    )
    normalizer = TimestampNormalizer(
        lead_ms=config.timestamp_lead_ms,
        now_ms=now_ms or current_time_ms,
    )

    def bulk(
        name: str,
        *types: RecordType,
        transforms: Mapping[RecordType, RecordTransform] | None = None,
    ) -> BulkImportPhase:
        return BulkImportPhase(
            name=name,
            wanted=frozenset(types),
            uploader=uploader,
            driver=driver,
            transforms=transforms or {},
            work_dir=config.work_dir,
        )

    return ImportPipeline(
        phases=(
            bulk("infrastructure", RecordType.TEAM, RecordType.CHANNEL),
            PluginPhase(
                remote,
                releases=releases,
                force_local=force_plugins,
                force_all=force_github_plugins,
            ),
            ChannelCategoryPhase(remote, remote),
            ChannelBannerPhase(remote, remote),
            CommandPhase(remote, remote),
            bulk(
                "users",
                RecordType.USER,
                transforms={
                    RecordType.USER: ChannelMembershipExtractor(
                        default_channels=config.default_channels
                    )
                },
            ),
            ChannelMembershipPhase(remote),
            UserAttributePhase(remote, remote),
            bulk("posts", RecordType.POST, transforms={RecordType.POST: normalizer}),
        )
    )
