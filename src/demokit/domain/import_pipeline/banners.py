"""Channel banner configuration."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.domain.model import ChannelBanner
from demokit.domain.ports import RemoteServiceError

from .channel_lookup import ChannelResolver
from .context import PhaseResult
from .errors import ChannelNotFoundError
from .records import ChannelBannerRecord, RecordType
from .source import iter_custom_records

if TYPE_CHECKING:
    from demokit.domain.ports import ChannelAdminService, DirectoryService

    from .context import PipelineContext

log = getLogger(__name__)


@dataclass(slots=True)
class ChannelBannerPhase:
    channels: ChannelAdminService
    directory: DirectoryService
    name: str = "channel-banners"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        resolver = ChannelResolver(self.directory)
        for record in iter_custom_records(
            context.source_path, RecordType.CHANNEL_BANNER, ChannelBannerRecord
        ):
            banner = record.banner
            try:
                channel = resolver.channel(banner.team, banner.channel)
                self.channels.update_channel_banner(
                    channel.id,
                    ChannelBanner(
                        text=banner.text,
                        background_color=banner.background_color,
                        enabled=banner.enabled,
                    ),
                )
            except (ChannelNotFoundError, RemoteServiceError) as exc:
                log.warning("Failed to set banner on %s: %s", banner.channel, exc)
                result.errors += 1
                continue
            result.processed += 1

        log.info(
            "Channel banners finished: updated=%d, errors=%d", result.processed, result.errors
        )
        return result
