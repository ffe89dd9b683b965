from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from demokit.domain.import_pipeline.phase_filter import VERSION_HEADER, PhaseFilter
from demokit.domain.import_pipeline.records import RecordType
from demokit.domain.import_pipeline.transforms import ChannelMembershipExtractor
from tests.support.fake_mattermost import read_jsonl

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from demokit.domain.import_pipeline.context import PipelineContext



def test_filter_keeps_wanted_types_in_source_order(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
    sample_records: list[dict[str, Any]],
    tmp_path: Path,
) -> None:
    context = make_context(sample_records)
    out = tmp_path / "out.jsonl"

    stats = PhaseFilter(frozenset({RecordType.TEAM, RecordType.CHANNEL})).write(context, out)

    written = read_jsonl(out)
    assert written[0] == json.loads(VERSION_HEADER)
    assert [record["type"] for record in written[1:]] == ["team", "channel"]
    assert written[1] == sample_records[1]
    assert stats.matched == 2
    assert context.imported_teams == ["eng"]


def test_filter_prepends_version_header_even_without_matches(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
    tmp_path: Path,
) -> None:
    context = make_context([{"type": "team", "team": {"name": "eng"}}])
    out = tmp_path / "out.jsonl"

    stats = PhaseFilter(frozenset({RecordType.POST})).write(context, out)

    assert stats.matched == 0
    assert out.read_text().splitlines() == [VERSION_HEADER]


def test_filter_drops_malformed_unknown_and_custom_lines(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    context = make_context(
        [
            "{broken",
            {"type": "emoji", "emoji": {"name": "party"}},
            {"type": "plugin", "plugin": {"source": "local", "plugin_id": "x", "path": "p"}},
            {"type": "team", "team": {"display_name": "missing name"}},
            {"type": "team", "team": {"name": "eng"}},
        ]
    )
    out = tmp_path / "out.jsonl"

    stats = PhaseFilter(frozenset({RecordType.TEAM})).write(context, out)

    assert [record.get("team") for record in read_jsonl(out)[1:]] == [{"name": "eng"}]
    assert stats.matched == 1
    assert stats.invalid == 1
    assert "invalid JSON" in caplog.text
    assert "unknown type 'emoji'" in caplog.text
    assert "plugin" not in caplog.text


def test_filter_deduplicates_team_names(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
    tmp_path: Path,
) -> None:
    context = make_context(
        [
            {"type": "team", "team": {"name": "eng"}},
            {"type": "team", "team": {"name": "ops"}},
            {"type": "team", "team": {"name": "eng"}},
        ]
    )

    PhaseFilter(frozenset({RecordType.TEAM})).write(context, tmp_path / "out.jsonl")

    assert context.imported_teams == ["eng", "ops"]


def test_filter_writes_original_line_when_transform_fails(
    make_context: Callable[[Sequence[dict[str, Any] | str]], PipelineContext],
    tmp_path: Path,
) -> None:
    nameless = {"type": "user", "user": {"email": "x@example.com", "teams": [{"name": "eng"}]}}
    context = make_context([nameless])
    out = tmp_path / "out.jsonl"

    stats = PhaseFilter(
        frozenset({RecordType.USER}),
        {RecordType.USER: ChannelMembershipExtractor()},
    ).write(context, out)

    assert read_jsonl(out)[1:] == [nameless]
    assert stats.matched == 1
    assert stats.transform_errors == 1
    assert context.channel_memberships == {}
