from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from demokit.domain.import_pipeline import PipelineContext
from tests.support.fake_mattermost import FakeReleaseLookup, FakeRemote, write_jsonl

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in (
        "MM_SERVER_URL",
        "MM_TOKEN",
        "MM_ADMIN_USERNAME",
        "MM_ADMIN_PASSWORD",
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "DEMOKIT_JOB_POLL_INTERVAL",
        "DEMOKIT_JOB_TIMEOUT",
        "DEMOKIT_UPLOAD_CHUNK_SIZE",
        "DEMOKIT_WORK_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DEMOKIT_CACHE_DIR", str(tmp_path / "cache"))


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def fake_releases() -> FakeReleaseLookup:
    return FakeReleaseLookup()


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[[Sequence[Mapping[str, Any] | str]], Path]:
    def factory(records: Sequence[Mapping[str, Any] | str]) -> Path:
        return write_jsonl(tmp_path / "bulk_import.jsonl", records)

    return factory


@pytest.fixture
def make_context(
    make_source: Callable[[Sequence[Mapping[str, Any] | str]], Path],
) -> Callable[[Sequence[Mapping[str, Any] | str]], PipelineContext]:
    def factory(records: Sequence[Mapping[str, Any] | str]) -> PipelineContext:
        return PipelineContext(source_path=make_source(records))

    return factory


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Team ``eng`` with channel ``general``, users alice and bob, one post."""

    return [
        {"type": "version", "version": 1},
        {"type": "team", "team": {"name": "eng", "display_name": "Engineering", "type": "O"}},
        {
            "type": "channel",
            "channel": {"team": "eng", "name": "general", "display_name": "General", "type": "O"},
        },
        {
            "type": "user",
            "user": {
                "username": "alice",
                "email": "alice@example.com",
                "teams": [
                    {"name": "eng", "roles": "team_user", "channels": [{"name": "general"}]}
                ],
            },
        },
        {
            "type": "user",
            "user": {
                "username": "bob",
                "email": "bob@example.com",
                "teams": [{"name": "eng", "roles": "team_user", "channels": []}],
            },
        },
        {
            "type": "post",
            "post": {
                "team": "eng",
                "channel": "general",
                "user": "alice",
                "message": "hello",
                "create_at": 1_000,
            },
        },
    ]
