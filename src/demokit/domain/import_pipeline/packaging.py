"""Archive a filtered phase artifact for upload."""

from __future__ import annotations

import zipfile
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import PackagingError

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

ARCHIVE_ENTRY_NAME: Final[str] = "import.jsonl"


def package_artifact(source: Path, archive: Path) -> Path:
    """Write ``source`` into a deflated zip at ``archive`` as its only entry."""

    try:
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
            bundle.write(source, arcname=ARCHIVE_ENTRY_NAME)
    except (OSError, zipfile.BadZipFile) as exc:
        raise PackagingError(f"failed to package {source.name}: {exc}") from exc

    log.debug("Packaged %s into %s (%d bytes)", source.name, archive.name, archive.stat().st_size)
    return archive
