"""Bulk import runtime settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .env import env_float, env_int, optional_env_var
from .errors import SourceNotFoundError

DEFAULT_SOURCE_CANDIDATES: Final[tuple[str, ...]] = (
    "bulk_import.jsonl",
    "../bulk_import.jsonl",
)
DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 2.0
DEFAULT_JOB_TIMEOUT_SECONDS: Final[float] = 60 * 60.0
DEFAULT_UPLOAD_CHUNK_SIZE: Final[int] = 8 * 1024 * 1024
DEFAULT_CHANNELS: Final[tuple[str, ...]] = ("town-square", "off-topic")
DEFAULT_TIMESTAMP_LEAD_MS: Final[int] = 5 * 60 * 1000


@dataclass(frozen=True, slots=True)
class ImportSettings:
    """Tunables for a bulk import run.

    ``job_timeout`` of ``0`` disables the wall-clock limit on job polling.
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    job_timeout: float = DEFAULT_JOB_TIMEOUT_SECONDS
    upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE
    default_channels: tuple[str, ...] = field(default=DEFAULT_CHANNELS)
    timestamp_lead_ms: int = DEFAULT_TIMESTAMP_LEAD_MS
    work_dir: Path | None = None


def get_import_settings() -> ImportSettings:
    work_dir = optional_env_var("DEMOKIT_WORK_DIR")
    return ImportSettings(
        poll_interval=env_float(
            "DEMOKIT_JOB_POLL_INTERVAL", DEFAULT_POLL_INTERVAL_SECONDS, minimum=0.0
        ),
        job_timeout=env_float("DEMOKIT_JOB_TIMEOUT", DEFAULT_JOB_TIMEOUT_SECONDS, minimum=0.0),
        upload_chunk_size=env_int(
            "DEMOKIT_UPLOAD_CHUNK_SIZE", DEFAULT_UPLOAD_CHUNK_SIZE, minimum=1
        ),
        work_dir=Path(work_dir) if work_dir else None,
    )


def resolve_source_path(explicit: str | Path | None = None, *, cwd: Path | None = None) -> Path:
    """Return the bulk import source to read.

    An explicit path must exist. Otherwise the default candidates are tried relative
    to ``cwd`` in order.
    """

    base = cwd or Path.cwd()
    if explicit is not None:
        path = Path(explicit).expanduser()
        if not path.is_absolute():
            path = base / path
        if not path.is_file():
            raise SourceNotFoundError(f"Bulk import file not found: {path}")
        return path.resolve()

    for candidate in DEFAULT_SOURCE_CANDIDATES:
        path = base / candidate
        if path.is_file():
            return path.resolve()

    tried = ", ".join(DEFAULT_SOURCE_CANDIDATES)
    raise SourceNotFoundError(f"No bulk import file found (tried: {tried})")
