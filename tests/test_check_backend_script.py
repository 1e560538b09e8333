"""Tests for the backend configuration check script."""

from __future__ import annotations

from pathlib import Path

import pytest

from scripts import check_backend
from showcase.services.diagnostics import BucketStatus, DiagnosticsReport, TableStatus

REQUIRED_ENV_KEYS = ["SUPABASE_URL", "SUPABASE_ANON_KEY"]


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in REQUIRED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize("command", ["config", "probe"])
def test_main_requires_existing_env_file(tmp_path: Path, command: str) -> None:
    exit_code = check_backend.main([command, "--env-file", str(tmp_path / ".missing-env")])
    assert exit_code == check_backend.EXIT_RUNTIME_ERROR


def test_config_accepts_complete_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    env_file = tmp_path / ".env"
    _clear_required_env(monkeypatch)
    _write_env(env_file, SUPABASE_URL="https://project.example.co/", SUPABASE_ANON_KEY="anon")

    exit_code = check_backend.main(["config", "--env-file", str(env_file)])

    assert exit_code == check_backend.EXIT_OK
    assert "https://project.example.co " in capsys.readouterr().out


def test_config_reports_missing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    _clear_required_env(monkeypatch)
    _write_env(env_file, SUPABASE_URL="https://project.example.co")

    exit_code = check_backend.main(["config", "--env-file", str(env_file)])

    assert exit_code == check_backend.EXIT_VALIDATION_ERROR


def test_probe_exit_code_follows_report(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, SUPABASE_URL="https://project.example.co", SUPABASE_ANON_KEY="anon")
    report = DiagnosticsReport(
        tables=[TableStatus(table="music", exists=True)],
        buckets=[BucketStatus(bucket="music", exists=False)],
    )

    async def fake_probe(settings, access_token):
        return report

    monkeypatch.setattr(check_backend, "_run_probe", fake_probe)

    exit_code = check_backend.main(["probe", "--env-file", str(env_file)])

    assert exit_code == check_backend.EXIT_BACKEND_ERROR
    output = capsys.readouterr().out
    assert "music: MISSING" in output
    assert "not signed in" in output
