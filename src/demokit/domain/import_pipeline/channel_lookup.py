"""Resolve teams and channels by name for the API-driven phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.domain.ports import RemoteServiceError

from .errors import ChannelNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from demokit.domain.model import RemoteChannel, RemoteTeam
    from demokit.domain.ports import DirectoryService

log = getLogger(__name__)


@dataclass(slots=True)
class ChannelResolver:
    directory: DirectoryService
    _teams: dict[str, RemoteTeam] = field(default_factory=dict, init=False)

    def team(self, name: str) -> RemoteTeam:
        cached = self._teams.get(name)
        if cached is None:
            cached = self.directory.get_team_by_name(name)
            self._teams[name] = cached
        return cached

    def channel(self, team_name: str, channel_name: str) -> RemoteChannel:
        """Return ``channel_name`` in ``team_name`` or raise ``ChannelNotFoundError``."""

        try:
            team = self.team(team_name)
            return self.directory.get_channel_by_name(team.id, channel_name)
        except RemoteServiceError as exc:
            raise ChannelNotFoundError(
                f"channel '{channel_name}' not found in team '{team_name}': {exc}"
            ) from exc

    def find_in_teams(self, teams: Sequence[RemoteTeam], channel_name: str) -> RemoteChannel:
        """Search ``teams`` in order and return the first channel named ``channel_name``."""

        for team in teams:
            try:
                return self.directory.get_channel_by_name(team.id, channel_name)
            except RemoteServiceError as exc:
                log.debug("Channel %s not in team %s: %s", channel_name, team.name, exc)
        searched = ", ".join(team.name for team in teams)
        raise ChannelNotFoundError(f"channel '{channel_name}' not found in teams: {searched}")
