"""Slash commands executed on behalf of the importing admin."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.domain.ports import RemoteServiceError

from .channel_lookup import ChannelResolver
from .context import PhaseResult
from .errors import ChannelNotFoundError
from .records import CommandRecord, RecordType
from .source import iter_custom_records

if TYPE_CHECKING:
    from demokit.domain.ports import ChannelAdminService, DirectoryService

    from .context import PipelineContext

log = getLogger(__name__)


@dataclass(slots=True)
class CommandPhase:
    channels: ChannelAdminService
    directory: DirectoryService
    name: str = "commands"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        resolver = ChannelResolver(self.directory)
        for record in iter_custom_records(context.source_path, RecordType.COMMAND, CommandRecord):
            command = record.command
            text = command.text.strip()
            if not text.startswith("/"):
                log.warning("Ignoring command %r: commands must start with '/'", command.text)
                result.errors += 1
                continue
            try:
                channel = resolver.channel(command.team, command.channel)
                self.channels.execute_command(channel.id, text)
            except (ChannelNotFoundError, RemoteServiceError) as exc:
                log.warning("Command %s failed in %s: %s", text.split()[0], command.channel, exc)
                result.errors += 1
                continue
            result.processed += 1

        log.info("Commands finished: executed=%d, errors=%d", result.processed, result.errors)
        return result
