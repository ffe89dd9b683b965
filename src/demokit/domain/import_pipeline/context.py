"""Per-run state shared between import phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


@dataclass(slots=True)
class PipelineContext:
    """Mutable state owned by a single import run.

    ``channel_memberships`` and ``imported_teams`` are filled while the bulk phases
    filter the source and drained by the membership phase. ``timestamp_offset`` is
    resolved at most once per run; ``None`` after resolution means no usable post
    timestamps were found.
    """

    source_path: Path
    channel_memberships: dict[str, set[str]] = field(default_factory=dict[str, set[str]])
    imported_teams: list[str] = field(default_factory=list[str])
    timestamp_offset: int | None = None
    timestamp_offset_resolved: bool = False

    def remember_team(self, name: str) -> None:
        if name not in self.imported_teams:
            self.imported_teams.append(name)

    def remember_memberships(self, username: str, channels: Iterable[str]) -> None:
        names = {channel for channel in channels if channel}
        if not names:
            return
        self.channel_memberships.setdefault(username, set()).update(names)

    def clear_relationships(self) -> None:
        self.channel_memberships.clear()
        self.imported_teams.clear()

    def reset(self) -> None:
        self.clear_relationships()
        self.timestamp_offset = None
        self.timestamp_offset_resolved = False


@dataclass(slots=True)
class PhaseResult:
    """Aggregated outcome reported once per phase."""

    phase: str
    processed: int = 0
    errors: int = 0
    skipped: int = 0
    job_id: str | None = None

    @property
    def is_noop(self) -> bool:
        return self.processed == 0 and self.errors == 0 and self.skipped == 0
