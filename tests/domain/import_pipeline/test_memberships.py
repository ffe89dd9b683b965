from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from demokit.domain.import_pipeline.context import PipelineContext
from demokit.domain.import_pipeline.errors import MembershipResolutionError
from demokit.domain.import_pipeline.memberships import ChannelMembershipPhase
from demokit.domain.model import MembershipOutcome
from demokit.domain.ports import RemoteServiceError
from tests.support.fake_mattermost import FakeRemote

if TYPE_CHECKING:
    from pathlib import Path


def _context(
    tmp_path: Path, memberships: dict[str, set[str]], teams: list[str]
) -> PipelineContext:
    context = PipelineContext(source_path=tmp_path / "bulk_import.jsonl")
    for username, channels in memberships.items():
        context.remember_memberships(username, channels)
    for team in teams:
        context.remember_team(team)
    return context


def test_joins_users_to_channels_across_teams(tmp_path: Path) -> None:
    remote = FakeRemote()
    remote.add_channel("eng", "general")
    remote.add_channel("ops", "alerts")
    remote.add_user("alice")
    context = _context(tmp_path, {"alice": {"general", "alerts"}}, ["eng", "ops"])

    result = ChannelMembershipPhase(remote).run(context)

    assert result.processed == 2
    assert result.errors == 0
    assert remote.channel_members("eng", "general") == {"alice"}
    assert remote.channel_members("ops", "alerts") == {"alice"}
    assert context.channel_memberships == {}
    assert context.imported_teams == []


def test_first_team_with_channel_wins(tmp_path: Path) -> None:
    remote = FakeRemote()
    remote.add_channel("eng", "general")
    remote.add_channel("ops", "general")
    remote.add_user("alice")
    context = _context(tmp_path, {"alice": {"general"}}, ["ops", "eng"])

    ChannelMembershipPhase(remote).run(context)

    assert remote.channel_members("ops", "general") == {"alice"}
    assert remote.channel_members("eng", "general") == set()


def test_counts_missing_users_and_channels_as_errors(tmp_path: Path) -> None:
    remote = FakeRemote()
    remote.add_channel("eng", "general")
    remote.add_user("alice")
    context = _context(
        tmp_path,
        {"alice": {"general", "nowhere"}, "ghost": {"general"}},
        ["eng"],
    )

    result = ChannelMembershipPhase(remote).run(context)

    assert result.processed == 1
    assert result.errors == 2
    assert context.channel_memberships == {}


def test_already_a_member_counts_as_success(tmp_path: Path) -> None:
    remote = FakeRemote()
    channel = remote.add_channel("eng", "general")
    alice = remote.add_user("alice")
    assert remote.add_channel_member(channel.id, alice.id) is MembershipOutcome.ADDED
    context = _context(tmp_path, {"alice": {"general"}}, ["eng"])

    result = ChannelMembershipPhase(remote).run(context)

    assert result.processed == 1
    assert result.errors == 0


def test_already_member_error_from_server_counts_as_success(tmp_path: Path) -> None:
    class _StrictRemote(FakeRemote):
        def add_channel_member(self, channel_id: str, user_id: str) -> MembershipOutcome:
            raise RemoteServiceError("user is already a member of the channel", status_code=400)

    remote = _StrictRemote()
    remote.add_channel("eng", "general")
    remote.add_user("alice")
    context = _context(tmp_path, {"alice": {"general"}}, ["eng"])

    result = ChannelMembershipPhase(remote).run(context)

    assert result.processed == 1
    assert result.errors == 0


@pytest.mark.parametrize(
    ("memberships", "teams"),
    [({}, ["eng"]), ({"alice": {"general"}}, [])],
)
def test_noop_when_either_cache_is_empty(
    tmp_path: Path, memberships: dict[str, set[str]], teams: list[str]
) -> None:
    remote = FakeRemote()
    context = _context(tmp_path, memberships, teams)

    result = ChannelMembershipPhase(remote).run(context)

    assert result.is_noop
    assert remote.join_calls == []
    assert context.channel_memberships == {}
    assert context.imported_teams == []


def test_unresolvable_teams_abort_and_still_clear_caches(tmp_path: Path) -> None:
    remote = FakeRemote()
    context = _context(tmp_path, {"alice": {"general"}}, ["missing"])

    with pytest.raises(MembershipResolutionError):
        ChannelMembershipPhase(remote).run(context)

    assert context.channel_memberships == {}
    assert context.imported_teams == []
