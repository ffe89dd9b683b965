from __future__ import annotations

import pytest

from demokit.domain.import_pipeline import ImportRunResult, PhaseResult
from demokit.ui import cli as cli_module


def _capture(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_import(**kwargs: object) -> ImportRunResult:
        captured.update(kwargs)
        return ImportRunResult(phases=[PhaseResult(phase="infrastructure", processed=2)])

    monkeypatch.setattr(cli_module, "run_bulk_import", fake_import)
    return captured


def test_import_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    cli_module.main(["import"])

    assert captured["source_path"] is None
    assert captured["force_plugins"] is False
    assert captured["force_github_plugins"] is False
    settings = captured["settings"]
    assert getattr(settings, "poll_interval") == 2.0


def test_import_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    cli_module.main(
        [
            "import",
            "--file",
            "data/bulk.jsonl",
            "--force-plugins",
            "--force-github-plugins",
            "--poll-interval",
            "0.5",
            "--job-timeout",
            "30",
        ]
    )

    assert captured["source_path"] == "data/bulk.jsonl"
    assert captured["force_plugins"] is True
    assert captured["force_github_plugins"] is True
    settings = captured["settings"]
    assert getattr(settings, "poll_interval") == 0.5
    assert getattr(settings, "job_timeout") == 30.0


def test_negative_poll_interval_is_a_validation_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["import", "--poll-interval", "-1"])

    assert excinfo.value.code == 2


def test_failed_run_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_import(**_: object) -> ImportRunResult:
        raise RuntimeError("phase 'users' failed: boom")

    monkeypatch.setattr(cli_module, "run_bulk_import", failing_import)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["import"])

    assert excinfo.value.code == 1


def test_phases_command_lists_order(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    _capture(monkeypatch)
    caplog.set_level("INFO")

    cli_module.main(["phases"])

    assert "1. infrastructure" in caplog.text
    assert "9. posts" in caplog.text
