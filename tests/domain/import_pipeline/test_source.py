from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from demokit.domain.import_pipeline.errors import MalformedRecordError, UnknownRecordTypeError
from demokit.domain.import_pipeline.records import (
    CUSTOM_RECORD_TYPES,
    CommandRecord,
    PluginRecord,
    RecordType,
    TeamRecord,
)
from demokit.domain.import_pipeline.source import (
    iter_custom_records,
    iter_source_lines,
    parse_record,
    validate_record,
)
from tests.support.fake_mattermost import write_jsonl

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_record_probes_type() -> None:
    record = parse_record(3, json.dumps({"type": "team", "team": {"name": "eng"}}))

    assert record.line_number == 3
    assert record.type == "team"
    assert record.record_type is RecordType.TEAM
    assert record.data["team"] == {"name": "eng"}


@pytest.mark.parametrize("line", ["{not json", "[1, 2]", '{"team": {"name": "eng"}}'])
def test_parse_record_rejects_unclassifiable_lines(line: str) -> None:
    with pytest.raises(MalformedRecordError):
        parse_record(1, line)


def test_unknown_type_has_no_record_type() -> None:
    record = parse_record(1, '{"type": "emoji", "emoji": {}}')

    assert record.record_type is None
    with pytest.raises(UnknownRecordTypeError):
        validate_record(record)


def test_validate_record_returns_typed_model() -> None:
    record = parse_record(1, '{"type": "team", "team": {"name": "eng", "type": "O"}}')

    parsed = validate_record(record)

    assert isinstance(parsed, TeamRecord)
    assert parsed.team.name == "eng"


def test_validate_record_reports_field_errors() -> None:
    record = parse_record(7, '{"type": "channel", "channel": {"name": "general"}}')

    with pytest.raises(MalformedRecordError) as excinfo:
        validate_record(record)

    assert "line 7" in str(excinfo.value)
    assert "team" in str(excinfo.value)


def test_custom_types_are_flagged() -> None:
    assert RecordType.PLUGIN.is_custom
    assert not RecordType.POST.is_custom
    assert RecordType.USER_PROFILE in CUSTOM_RECORD_TYPES


def test_iter_source_lines_skips_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "source.jsonl"
    path.write_text('{"type": "version", "version": 1}\n\n   \n{"type": "team"}\n')

    lines = list(iter_source_lines(path))

    assert [number for number, _ in lines] == [1, 4]


def test_iter_custom_records_skips_other_types_and_broken_lines(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = write_jsonl(
        tmp_path / "source.jsonl",
        [
            {"type": "team", "team": {"name": "eng"}},
            {"type": "command", "command": {"team": "eng", "channel": "general", "text": "/x"}},
            {"type": "command", "command": {"team": "eng"}},
            "garbage",
        ],
    )

    records = list(iter_custom_records(path, RecordType.COMMAND, CommandRecord))

    assert [record.command.text for record in records] == ["/x"]
    assert "Skipping command record on line 3" in caplog.text


def test_plugin_record_requires_location() -> None:
    with pytest.raises(ValueError, match="github_repo"):
        PluginRecord.model_validate(
            {"type": "plugin", "plugin": {"source": "github", "plugin_id": "com.example"}}
        )
