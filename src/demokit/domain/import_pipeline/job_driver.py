"""Submit import jobs and wait for them to finish."""

from __future__ import annotations

import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.config.importer import DEFAULT_JOB_TIMEOUT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS
from demokit.domain.model import JobStatus

from .errors import (
    ImportJobCanceledError,
    ImportJobFailedError,
    ImportJobProtocolError,
    ImportJobTimeoutError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from demokit.domain.model import ImportJob
    from demokit.domain.ports import ImportJobService

    from .upload import ImportArtifact

log = getLogger(__name__)


@dataclass(slots=True)
class JobDriver:
    """Create an import job for an uploaded artifact and poll it to completion.

    ``timeout`` is measured with ``clock`` from job creation; ``0`` waits forever.
    """

    jobs: ImportJobService
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    timeout: float = DEFAULT_JOB_TIMEOUT_SECONDS
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic

    def run(self, artifact: ImportArtifact) -> ImportJob:
        return self.wait(self.start(artifact))

    def start(self, artifact: ImportArtifact) -> ImportJob:
        job = self.jobs.create_import_job(artifact.consume())
        log.info("Started import job %s for %s", job.id, artifact.stored_filename)
        return job

    def wait(self, job: ImportJob) -> ImportJob:
        deadline = self.clock() + self.timeout if self.timeout > 0 else None
        current = job
        while True:
            match current.status:
                case JobStatus.SUCCESS:
                    log.info("Import job %s finished", current.id)
                    return current
                case JobStatus.ERROR:
                    detail = current.error_detail or "no error detail reported"
                    raise ImportJobFailedError(f"import job failed: {detail}", job_id=current.id)
                case JobStatus.CANCELED:
                    raise ImportJobCanceledError("import job was canceled", job_id=current.id)
                case JobStatus.PENDING | JobStatus.IN_PROGRESS:
                    log.debug("Import job %s is %s", current.id, current.status)
                case _:
                    raise ImportJobProtocolError(
                        f"unknown job status: {current.status!r}", job_id=current.id
                    )

            if deadline is not None and self.clock() >= deadline:
                raise ImportJobTimeoutError(
                    f"import job {current.id} did not finish within {self.timeout:g}s",
                    job_id=current.id,
                )
            self.sleep(self.poll_interval)
            current = self.jobs.get_job(current.id)
