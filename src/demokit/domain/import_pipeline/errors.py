"""Error taxonomy for the bulk import pipeline."""

from __future__ import annotations


class BulkImportError(RuntimeError):
    """Base class for pipeline failures."""


class MalformedRecordError(BulkImportError):
    """A source line is not valid JSON or fails its typed parse."""


class UnknownRecordTypeError(BulkImportError):
    """A source line carries a ``type`` the pipeline does not recognise."""


class MembershipExtractionError(BulkImportError):
    """A user record cannot be rewritten (for example it lacks a username)."""


class TimestampScanError(BulkImportError):
    """No usable post timestamps were found while computing the offset."""


class PackagingError(BulkImportError):
    """The filtered phase artifact could not be archived."""


class UploadError(BulkImportError):
    """A step of the upload handshake failed."""


class ArtifactConsumedError(BulkImportError):
    """An uploaded artifact was handed to the job driver more than once."""


class ImportJobError(BulkImportError):
    """Base class for import job failures."""

    def __init__(self, message: str, *, job_id: str | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id


class ImportJobFailedError(ImportJobError):
    """The server reported the import job as failed."""


class ImportJobCanceledError(ImportJobError):
    """The import job was canceled on the server."""


class ImportJobProtocolError(ImportJobError):
    """The server reported a job status outside the known set."""


class ImportJobTimeoutError(ImportJobError):
    """The import job did not reach a terminal state in time."""


class ChannelNotFoundError(BulkImportError):
    """A channel could not be resolved in any candidate team."""


class MembershipResolutionError(BulkImportError):
    """None of the imported teams could be resolved on the server."""


class PluginInstallError(BulkImportError):
    """A plugin could not be located, installed or enabled."""


class PhaseFailedError(BulkImportError):
    """Raised by the orchestrator when a phase aborts the run."""

    def __init__(self, phase: str, cause: BaseException) -> None:
        super().__init__(f"phase '{phase}' failed: {cause}")
        self.phase = phase
        self.cause = cause
