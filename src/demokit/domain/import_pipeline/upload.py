"""Upload session handshake for import archives."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from demokit.config.importer import DEFAULT_UPLOAD_CHUNK_SIZE
from demokit.domain.ports import RemoteServiceError

from .errors import ArtifactConsumedError, UploadError

if TYPE_CHECKING:
    from pathlib import Path

    from demokit.domain.ports import UploadService

log = getLogger(__name__)


@dataclass(slots=True)
class ImportArtifact:
    """Server-side handle of an uploaded archive.

    The stored filename is what the import job refers to; it may be handed to a
    job exactly once.
    """

    stored_filename: str
    session_id: str
    size: int
    consumed: bool = False

    def consume(self) -> str:
        if self.consumed:
            raise ArtifactConsumedError(f"{self.stored_filename} was already submitted")
        self.consumed = True
        return self.stored_filename


@dataclass(slots=True)
class ArchiveUploader:
    service: UploadService
    chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE

    def upload(self, archive: Path) -> ImportArtifact:
        try:
            user = self.service.get_current_user()
        except RemoteServiceError as exc:
            raise UploadError(f"failed to get current user: {exc}") from exc

        size = archive.stat().st_size
        try:
            session = self.service.create_upload_session(
                filename=archive.name,
                file_size=size,
                user_id=user.id,
            )
        except RemoteServiceError as exc:
            raise UploadError(f"failed to create upload session: {exc}") from exc

        log.info("Uploading %s (%d bytes) in session %s", archive.name, size, session.id)
        try:
            with archive.open("rb") as handle:
                while chunk := handle.read(self.chunk_size):
                    self.service.upload_data(session.id, chunk)
        except RemoteServiceError as exc:
            raise UploadError(f"failed to upload {archive.name}: {exc}") from exc

        return ImportArtifact(
            stored_filename=f"{session.id}_{archive.name}",
            session_id=session.id,
            size=size,
        )
