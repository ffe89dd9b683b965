"""Deferred channel membership processing."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.domain.model import MembershipOutcome
from demokit.domain.ports import RemoteServiceError

from .channel_lookup import ChannelResolver
from .context import PhaseResult
from .errors import ChannelNotFoundError, MembershipResolutionError

if TYPE_CHECKING:
    from demokit.domain.model import RemoteTeam, RemoteUser
    from demokit.domain.ports import DirectoryService

    from .context import PipelineContext

log = getLogger(__name__)


@dataclass(slots=True)
class ChannelMembershipPhase:
    """Join imported users to the channels stripped from their user records.

    Runs after users and channels exist. Both caches on the context are cleared
    when the phase ends, whatever the outcome.
    """

    directory: DirectoryService
    name: str = "channel-memberships"

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        try:
            if not context.channel_memberships:
                log.info("No channel memberships to process")
                return result
            if not context.imported_teams:
                log.warning("Channel memberships recorded but no teams were imported")
                return result
            self._join_all(context, result)
        finally:
            context.clear_relationships()

        log.info(
            "Channel memberships finished: joined=%d, errors=%d",
            result.processed,
            result.errors,
        )
        return result

    def _join_all(self, context: PipelineContext, result: PhaseResult) -> None:
        resolver = ChannelResolver(self.directory)
        teams = self._resolve_teams(resolver, context.imported_teams)

        for username in sorted(context.channel_memberships):
            try:
                user = self.directory.get_user_by_username(username)
            except RemoteServiceError as exc:
                log.warning("Cannot resolve user %s: %s", username, exc)
                result.errors += 1
                continue

            for channel_name in sorted(context.channel_memberships[username]):
                if self._join(resolver, teams, user, channel_name):
                    result.processed += 1
                else:
                    result.errors += 1

    def _resolve_teams(self, resolver: ChannelResolver, names: list[str]) -> list[RemoteTeam]:
        teams: list[RemoteTeam] = []
        for name in names:
            try:
                teams.append(resolver.team(name))
            except RemoteServiceError as exc:
                log.warning("Skipping team %s: %s", name, exc)
        if not teams:
            raise MembershipResolutionError(
                f"none of the imported teams could be resolved: {', '.join(names)}"
            )
        return teams

    def _join(
        self,
        resolver: ChannelResolver,
        teams: list[RemoteTeam],
        user: RemoteUser,
        channel_name: str,
    ) -> bool:
        try:
            channel = resolver.find_in_teams(teams, channel_name)
        except ChannelNotFoundError as exc:
            log.warning("Cannot add %s: %s", user.username, exc)
            return False

        try:
            outcome = self.directory.add_channel_member(channel.id, user.id)
        except RemoteServiceError as exc:
            if not exc.indicates_existing:
                log.warning("Failed to add %s to %s: %s", user.username, channel_name, exc)
                return False
            outcome = MembershipOutcome.ALREADY_MEMBER

        if outcome is MembershipOutcome.ALREADY_MEMBER:
            log.debug("%s already in %s", user.username, channel_name)
        return True
