"""Stream the source once and keep the records a phase imports."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

from .errors import BulkImportError, MalformedRecordError, UnknownRecordTypeError
from .records import RecordType, TeamRecord
from .source import iter_source_lines, parse_record, validate_record
from .transforms import dump_record

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from .context import PipelineContext
    from .transforms import RecordTransform

log = getLogger(__name__)

VERSION_HEADER: Final[str] = dump_record({"type": "version", "version": 1})


@dataclass(slots=True)
class FilterStats:
    matched: int = 0
    invalid: int = 0
    transform_errors: int = 0


@dataclass(slots=True)
class PhaseFilter:
    """Write the wanted records of the source to ``destination``.

    The artifact always starts with a version header. Records keep their relative
    source order. Lines that cannot be classified are logged and dropped; custom
    record types are dropped silently. A transform failure writes the original
    line unchanged.
    """

    wanted: frozenset[RecordType]
    transforms: Mapping[RecordType, RecordTransform] = field(default_factory=dict)

    def write(self, context: PipelineContext, destination: Path) -> FilterStats:
        stats = FilterStats()
        with destination.open("w", encoding="utf-8") as out:
            out.write(VERSION_HEADER + "\n")
            for line_number, line in iter_source_lines(context.source_path):
                written = self._filter_line(context, line_number, line, stats)
                if written is None:
                    continue
                out.write(written + "\n")
                stats.matched += 1
        return stats

    def _filter_line(
        self,
        context: PipelineContext,
        line_number: int,
        line: str,
        stats: FilterStats,
    ) -> str | None:
        try:
            record = parse_record(line_number, line)
        except MalformedRecordError as exc:
            log.warning("Dropping line: %s", exc)
            return None

        record_type = record.record_type
        if record_type is None:
            log.warning("Dropping line %d with unknown type %r", line_number, record.type)
            return None
        if record_type.is_custom or record_type not in self.wanted:
            return None

        try:
            parsed = validate_record(record)
        except (MalformedRecordError, UnknownRecordTypeError) as exc:
            log.warning("Dropping record: %s", exc)
            stats.invalid += 1
            return None

        if record_type is RecordType.TEAM:
            context.remember_team(cast(TeamRecord, parsed).team.name)

        transform = self.transforms.get(record_type)
        if transform is None:
            return record.raw
        try:
            return transform(record, parsed, context)
        except BulkImportError as exc:
            log.warning("Keeping original %s record: %s", record_type, exc)
            stats.transform_errors += 1
            return record.raw
