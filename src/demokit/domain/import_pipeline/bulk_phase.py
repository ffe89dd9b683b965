"""Phases replayed through the server's asynchronous bulk importer."""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from .context import PhaseResult
from .packaging import package_artifact
from .phase_filter import PhaseFilter

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from .context import PipelineContext
    from .job_driver import JobDriver
    from .records import RecordType
    from .transforms import RecordTransform
    from .upload import ArchiveUploader

log = getLogger(__name__)


@contextmanager
def phase_artifacts(name: str, *, work_dir: Path | None = None) -> Iterator[tuple[Path, Path]]:
    """Yield ``(jsonl, archive)`` temp paths that are removed on exit."""

    fd, raw_path = tempfile.mkstemp(prefix=f"import_{name}_", suffix=".jsonl", dir=work_dir)
    os.close(fd)
    jsonl = Path(raw_path)
    archive = jsonl.with_suffix(".zip")
    try:
        yield jsonl, archive
    finally:
        for path in (jsonl, archive):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                log.warning("Could not remove temporary file %s: %s", path, exc)


@dataclass(slots=True)
class BulkImportPhase:
    """Filter, package, upload and import one group of record types."""

    name: str
    wanted: frozenset[RecordType]
    uploader: ArchiveUploader
    driver: JobDriver
    transforms: Mapping[RecordType, RecordTransform] = field(default_factory=dict)
    work_dir: Path | None = None

    def run(self, context: PipelineContext) -> PhaseResult:
        result = PhaseResult(phase=self.name)
        with phase_artifacts(self.name, work_dir=self.work_dir) as (jsonl, archive):
            stats = PhaseFilter(self.wanted, self.transforms).write(context, jsonl)
            result.processed = stats.matched
            result.skipped = stats.invalid
            result.errors = stats.transform_errors
            if stats.matched == 0:
                log.info("No %s items found, skipping import", self.name)
                return result

            log.info("Importing %d %s record(s)", stats.matched, self.name)
            package_artifact(jsonl, archive)
            artifact = self.uploader.upload(archive)
            job = self.driver.run(artifact)
            result.job_id = job.id
        return result
