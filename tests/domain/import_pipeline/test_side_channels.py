from __future__ import annotations

from typing import TYPE_CHECKING, Any

from demokit.domain.import_pipeline.banners import ChannelBannerPhase
from demokit.domain.import_pipeline.categories import (
    CATEGORIZE_ACTION,
    NEW_MEMBER_TRIGGER,
    ChannelCategoryPhase,
)
from demokit.domain.import_pipeline.commands import CommandPhase
from demokit.domain.import_pipeline.records import AttributePayload
from demokit.domain.import_pipeline.user_attributes import (
    UserAttributePhase,
    build_field_definition,
)
from demokit.domain.ports import RemoteServiceError
from tests.support.fake_mattermost import FakeRemote

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from demokit.domain.import_pipeline.context import PipelineContext
    from demokit.domain.model import ChannelAction


def _seeded_remote() -> FakeRemote:
    remote = FakeRemote()
    remote.add_channel("eng", "general")
    remote.add_channel("eng", "random")
    remote.add_user("alice")
    return remote


def test_categories_create_action_once(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
) -> None:
    remote = _seeded_remote()
    context = make_context(
        [
            {
                "type": "channel-category",
                "team": "eng",
                "category": "Projects",
                "channels": ["general", "random", "missing"],
            }
        ]
    )
    phase = ChannelCategoryPhase(remote, remote)

    first = phase.run(context)
    second = phase.run(context)

    general = remote.channels[(remote.teams["eng"].id, "general")]
    actions = remote.actions[general.id]
    assert len(actions) == 1
    assert actions[0].action_type == CATEGORIZE_ACTION
    assert actions[0].trigger_type == NEW_MEMBER_TRIGGER
    assert actions[0].payload == {"category_name": "Projects"}
    assert (first.processed, first.skipped, first.errors) == (2, 0, 1)
    assert (second.processed, second.skipped, second.errors) == (0, 2, 1)


class _UnlistableActionsRemote(FakeRemote):
    def list_channel_actions(self, channel_id: str) -> list[ChannelAction]:
        raise RemoteServiceError(f"playbooks unavailable for {channel_id}", status_code=503)


def test_categories_still_created_when_listing_fails(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
) -> None:
    remote = _UnlistableActionsRemote()
    remote.add_channel("eng", "general")
    context = make_context(
        [{"type": "channel-category", "team": "eng", "category": "Ops", "channels": ["general"]}]
    )

    result = ChannelCategoryPhase(remote, remote).run(context)

    general = remote.channels[(remote.teams["eng"].id, "general")]
    assert [action.payload for action in remote.actions[general.id]] == [{"category_name": "Ops"}]
    assert (result.processed, result.skipped, result.errors) == (1, 0, 0)


def test_banners_patch_resolved_channels(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
) -> None:
    remote = _seeded_remote()
    context = make_context(
        [
            {
                "type": "channel-banner",
                "banner": {
                    "team": "eng",
                    "channel": "general",
                    "text": "Demo environment",
                    "background_color": "#FF0000",
                },
            },
            {
                "type": "channel-banner",
                "banner": {"team": "ops", "channel": "general", "text": "nope"},
            },
        ]
    )

    result = ChannelBannerPhase(remote, remote).run(context)

    general = remote.channels[(remote.teams["eng"].id, "general")]
    banner = remote.banners[general.id]
    assert banner.text == "Demo environment"
    assert banner.background_color == "#FF0000"
    assert banner.enabled is True
    assert (result.processed, result.errors) == (1, 1)


def test_commands_require_slash_prefix(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
) -> None:
    remote = _seeded_remote()
    context = make_context(
        [
            {"type": "command", "command": {"team": "eng", "channel": "general", "text": "/away"}},
            {"type": "command", "command": {"team": "eng", "channel": "general", "text": "away"}},
        ]
    )

    result = CommandPhase(remote, remote).run(context)

    general = remote.channels[(remote.teams["eng"].id, "general")]
    assert remote.commands == [(general.id, "/away")]
    assert (result.processed, result.errors) == (1, 1)


def test_build_field_definition_only_sends_configured_attrs() -> None:
    attribute = AttributePayload.model_validate(
        {
            "name": "department",
            "display_name": "Department",
            "type": "select",
            "ldap": "departmentNumber",
            "options": [{"name": "Sales"}, {"name": "R&D", "color": "#00FF00"}],
            "visibility": "always",
        }
    )

    definition = build_field_definition(attribute)

    options = [{"name": "Sales"}, {"name": "R&D", "color": "#00FF00"}]
    assert definition == {
        "name": "department",
        "display_name": "Department",
        "type": "select",
        "attrs": {"ldap": "departmentNumber", "options": options, "visibility": "always"},
    }
    assert "options" not in definition


def test_user_attributes_create_fields_and_apply_profiles(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
) -> None:
    remote = _seeded_remote()
    context = make_context(
        [
            {"type": "user-attribute", "attribute": {"name": "department", "type": "text"}},
            {"type": "user-attribute", "attribute": {"name": "location", "type": "text"}},
            {
                "type": "user-profile",
                "user": "alice",
                "attributes": {"department": "Sales", "shoe_size": "42"},
            },
            {"type": "user-profile", "user": "ghost", "attributes": {"location": "Berlin"}},
        ]
    )
    phase = UserAttributePhase(remote, remote)

    first = phase.run(context)
    second = phase.run(context)

    department = remote.fields["department"]
    assert set(remote.fields) == {"department", "location"}
    assert remote.profile_values[remote.users["alice"].id] == {department.id: "Sales"}
    assert (first.processed, first.skipped, first.errors) == (3, 0, 2)
    assert (second.processed, second.skipped, second.errors) == (1, 2, 2)
