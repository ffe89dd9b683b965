from __future__ import annotations

import zipfile
from typing import TYPE_CHECKING

import pytest

from demokit.domain.import_pipeline.errors import PackagingError
from demokit.domain.import_pipeline.packaging import ARCHIVE_ENTRY_NAME, package_artifact

if TYPE_CHECKING:
    from pathlib import Path


def test_package_artifact_writes_single_deflated_entry(tmp_path: Path) -> None:
    source = tmp_path / "import_users_abc.jsonl"
    source.write_text('{"type":"version","version":1}\n')

    archive = package_artifact(source, tmp_path / "import_users_abc.zip")

    with zipfile.ZipFile(archive) as bundle:
        infos = bundle.infolist()
        assert [info.filename for info in infos] == [ARCHIVE_ENTRY_NAME]
        assert infos[0].compress_type == zipfile.ZIP_DEFLATED
        assert bundle.read(ARCHIVE_ENTRY_NAME) == source.read_bytes()


def test_package_artifact_wraps_io_errors(tmp_path: Path) -> None:
    with pytest.raises(PackagingError):
        package_artifact(tmp_path / "missing.jsonl", tmp_path / "out.zip")
