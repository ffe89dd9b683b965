"""Assign channels to sidebar categories through Playbooks channel actions."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.domain.ports import RemoteServiceError

from .channel_lookup import ChannelResolver
from .context import PhaseResult
from .errors import ChannelNotFoundError
from .records import ChannelCategoryRecord, RecordType
from .source import iter_custom_records

if TYPE_CHECKING:
    from demokit.domain.ports import ChannelAdminService, DirectoryService

    from .context import PipelineContext

log = getLogger(__name__)

CATEGORIZE_ACTION = "categorize_channel"
NEW_MEMBER_TRIGGER = "new_member_joins"


@dataclass(slots=True)
class ChannelCategoryPhase:
    channels: ChannelAdminService
    directory: DirectoryService
    name: str = "channel-categories"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        resolver = ChannelResolver(self.directory)
        for record in iter_custom_records(
            context.source_path, RecordType.CHANNEL_CATEGORY, ChannelCategoryRecord
        ):
            for channel_name in record.channels:
                self._categorize(resolver, record, channel_name, result)

        log.info(
            "Channel categories finished: created=%d, skipped=%d, errors=%d",
            result.processed,
            result.skipped,
            result.errors,
        )
        return result

    def _categorize(
        self,
        resolver: ChannelResolver,
        record: ChannelCategoryRecord,
        channel_name: str,
        result: PhaseResult,
    ) -> None:
        try:
            channel = resolver.channel(record.team, channel_name)
        except ChannelNotFoundError as exc:
            log.warning("Cannot categorize: %s", exc)
            result.errors += 1
            return

        if self._already_categorized(channel.id, channel_name):
            result.skipped += 1
            return

        try:
            self.channels.create_channel_action(
                channel.id,
                action_type=CATEGORIZE_ACTION,
                trigger_type=NEW_MEMBER_TRIGGER,
                payload={"category_name": record.category},
            )
        except RemoteServiceError as exc:
            if exc.indicates_existing:
                result.skipped += 1
                return
            log.warning("Failed to categorize %s as %s: %s", channel_name, record.category, exc)
            result.errors += 1
            return

        log.debug("Channel %s categorized as %s", channel_name, record.category)
        result.processed += 1

    def _already_categorized(self, channel_id: str, channel_name: str) -> bool:
        # A failed listing is not proof of absence; creating is still attempted.
        try:
            actions = self.channels.list_channel_actions(channel_id)
        except RemoteServiceError as exc:
            log.warning("Cannot list actions for %s, creating anyway: %s", channel_name, exc)
            return False
        return any(action.action_type == CATEGORIZE_ACTION for action in actions)
