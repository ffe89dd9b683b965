"""In-flight rewrites applied to records while a phase filters the source."""

from __future__ import annotations

import copy
import json
import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol, cast

from demokit.config.importer import DEFAULT_CHANNELS, DEFAULT_TIMESTAMP_LEAD_MS

from .errors import MalformedRecordError, MembershipExtractionError, TimestampScanError
from .records import RecordType, UserRecord
from .source import iter_source_lines, parse_record

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from .context import PipelineContext
    from .records import RecordModel
    from .source import SourceRecord

log = getLogger(__name__)

DEFAULT_CHANNEL_ROLES = "channel_user"
POST_TIMESTAMP_FIELDS = ("create_at",)
PROPS_TIMESTAMP_FIELDS = ("start_at", "end_at")


class RecordTransform(Protocol):
    """Rewrite a validated record into the line written to the phase artifact."""

    def __call__(
        self,
        record: SourceRecord,
        parsed: RecordModel,
        context: PipelineContext,
    ) -> str: ...


def dump_record(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def current_time_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(slots=True)
class ChannelMembershipExtractor:
    """Move a user's channel memberships out of the bulk payload.

    The server joins users to the listed channels during import only if those
    channels already exist; they are instead recorded on the context and replayed
    by the membership phase. Every team membership keeps just the default channels.
    """

    default_channels: tuple[str, ...] = DEFAULT_CHANNELS
    roles: str = DEFAULT_CHANNEL_ROLES

    def __call__(
        self,
        record: SourceRecord,
        parsed: RecordModel,
        context: PipelineContext,
    ) -> str:
        user = cast(UserRecord, parsed).user
        if not user.username:
            raise MembershipExtractionError(f"line {record.line_number}: user has no username")

        channels = [
            channel.name
            for team in user.teams or ()
            for channel in team.channels or ()
            if channel.name
        ]
        context.remember_memberships(user.username, channels)

        data = copy.deepcopy(record.data)
        for team in data["user"].get("teams") or ():
            team["channels"] = [
                {"name": name, "roles": self.roles} for name in self.default_channels
            ]

        log.debug("Extracted %d channel(s) for %s", len(channels), user.username)
        return dump_record(data)


def _timestamp_slots(data: dict[str, Any]) -> Iterator[tuple[dict[str, Any], str]]:
    """Yield ``(container, key)`` for every numeric timestamp in a post record."""

    post = data.get("post")
    if not isinstance(post, dict):
        return
    post = cast(dict[str, Any], post)
    containers: list[tuple[object, tuple[str, ...]]] = [(post, POST_TIMESTAMP_FIELDS)]
    replies = post.get("replies")
    if isinstance(replies, list):
        containers.extend((reply, POST_TIMESTAMP_FIELDS) for reply in cast(list[Any], replies))
    containers.append((post.get("props"), PROPS_TIMESTAMP_FIELDS))

    for container, keys in containers:
        if not isinstance(container, dict):
            continue
        mapping = cast(dict[str, Any], container)
        for key in keys:
            value = mapping.get(key)
            if isinstance(value, int | float) and not isinstance(value, bool):
                yield mapping, key


def find_latest_post_timestamp(path: Path) -> int:
    """Return the newest positive post, reply or call timestamp in ``path``."""

    latest = 0
    for line_number, line in iter_source_lines(path):
        try:
            record = parse_record(line_number, line)
        except MalformedRecordError:
            continue
        if record.type != RecordType.POST:
            continue
        for container, key in _timestamp_slots(record.data):
            latest = max(latest, int(container[key]))

    if latest <= 0:
        raise TimestampScanError(f"no post timestamps found in {path}")
    return latest


@dataclass(slots=True)
class TimestampNormalizer:
    """Shift post timestamps so the newest one lands shortly before now.

    Relative ordering and spacing are preserved. When the offset cannot be
    computed, posts pass through unmodified for the rest of the run.
    """

    lead_ms: int = DEFAULT_TIMESTAMP_LEAD_MS
    now_ms: Callable[[], int] = field(default=current_time_ms)

    def resolve_offset(self, context: PipelineContext) -> int | None:
        if context.timestamp_offset_resolved:
            return context.timestamp_offset

        context.timestamp_offset_resolved = True
        try:
            latest = find_latest_post_timestamp(context.source_path)
        except (TimestampScanError, OSError) as exc:
            log.warning("Post timestamps left unchanged: %s", exc)
            context.timestamp_offset = None
            return None

        offset = (self.now_ms() - self.lead_ms) - latest
        context.timestamp_offset = offset
        log.info("Shifting post timestamps by %.1f hours", offset / 3_600_000)
        return offset

    def __call__(
        self,
        record: SourceRecord,
        parsed: RecordModel,  # noqa: ARG002
        context: PipelineContext,
    ) -> str:
        offset = self.resolve_offset(context)
        if offset is None:
            return record.raw

        data = copy.deepcopy(record.data)
        for container, key in _timestamp_slots(data):
            container[key] = int(container[key]) + offset
        return dump_record(data)


__all__ = [
    "ChannelMembershipExtractor",
    "RecordTransform",
    "current_time_ms",
    "TimestampNormalizer",
    "dump_record",
    "find_latest_post_timestamp",
]
