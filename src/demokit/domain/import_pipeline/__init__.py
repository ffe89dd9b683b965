"""Bulk import pipeline: classify, filter, package, upload and replay phases."""

from __future__ import annotations

from .bulk_phase import BulkImportPhase
from .context import PhaseResult, PipelineContext
from .errors import BulkImportError, PhaseFailedError
from .job_driver import JobDriver
from .memberships import ChannelMembershipPhase
from .orchestrator import ImportPipeline, ImportRunResult, PipelinePhase
from .records import CUSTOM_RECORD_TYPES, RecordType
from .runner import PHASE_NAMES, build_import_pipeline
from .upload import ArchiveUploader, ImportArtifact

__all__ = [
    "CUSTOM_RECORD_TYPES",
    "PHASE_NAMES",
    "ArchiveUploader",
    "BulkImportError",
    "BulkImportPhase",
    "ChannelMembershipPhase",
    "ImportArtifact",
    "ImportPipeline",
    "ImportRunResult",
    "JobDriver",
    "PhaseFailedError",
    "PhaseResult",
    "PipelineContext",
    "PipelinePhase",
    "RecordType",
    "build_import_pipeline",
]
