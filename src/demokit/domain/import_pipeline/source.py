"""Reading and classifying lines of the bulk import source."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError

from .errors import MalformedRecordError, UnknownRecordTypeError
from .records import RECORD_MODELS, RecordModel, RecordProbe, RecordType

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SourceRecord:
    """One decoded source line, before its type-specific validation."""

    line_number: int
    raw: str
    type: str
    data: dict[str, Any]

    @property
    def record_type(self) -> RecordType | None:
        try:
            return RecordType(self.type)
        except ValueError:
            return None


def iter_source_lines(path: Path) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs for every non-blank line of ``path``."""

    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            stripped = line.strip()
            if stripped:
                yield line_number, stripped


def parse_record(line_number: int, line: str) -> SourceRecord:
    """Decode ``line`` and probe its ``type`` field."""

    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise MalformedRecordError(f"line {line_number}: invalid JSON ({exc.msg})") from exc
    if not isinstance(data, dict):
        raise MalformedRecordError(f"line {line_number}: expected a JSON object")
    try:
        probe = RecordProbe.model_validate(data)
    except ValidationError as exc:
        raise MalformedRecordError(f"line {line_number}: missing record type") from exc
    return SourceRecord(
        line_number=line_number,
        raw=line,
        type=probe.type,
        data=cast(dict[str, Any], data),
    )


def validate_record(record: SourceRecord) -> RecordModel:
    """Run the full typed parse for ``record``."""

    record_type = record.record_type
    if record_type is None:
        raise UnknownRecordTypeError(f"line {record.line_number}: unknown type {record.type!r}")
    model = RECORD_MODELS[record_type]
    try:
        return model.model_validate(record.data)
    except ValidationError as exc:
        raise MalformedRecordError(
            f"line {record.line_number}: invalid {record_type} record ({_describe(exc)})"
        ) from exc


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


def iter_custom_records[TModel: RecordModel](
    path: Path,
    record_type: RecordType,
    model: type[TModel],
) -> Iterator[TModel]:
    """Yield validated records of a single custom type.

    Lines of other types are ignored silently; broken lines of ``record_type`` are
    logged and skipped.
    """

    for line_number, line in iter_source_lines(path):
        try:
            record = parse_record(line_number, line)
        except MalformedRecordError:
            continue
        if record.type != record_type:
            continue
        try:
            parsed = model.model_validate(record.data)
        except ValidationError as exc:
            log.warning(
                "Skipping %s record on line %d: %s",
                record_type,
                line_number,
                _describe(exc),
            )
            continue
        yield parsed


__all__ = [
    "SourceRecord",
    "iter_custom_records",
    "iter_source_lines",
    "parse_record",
    "validate_record",
]
