from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from propsynth.adapters.csv import CsvCertificateSource, CsvScheduleSource, TextGroupListSource
from propsynth.app import BuildReport
from propsynth.config import MissingConfigurationError
from propsynth.domain.pipeline import BuildStats
from propsynth.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path

_COUNTS = {"proposals": 2, "policy_hierarchy_assignments": 1, "hierarchies": 3}


@pytest.fixture
def certificates_csv(tmp_path: Path) -> Path:
    path = tmp_path / "certificates.csv"
    path.write_text("CertificateId\n", encoding="utf-8")
    return path


def _capture(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_build(**kwargs: object) -> BuildReport:
        captured.update(kwargs)
        return BuildReport(stats=BuildStats(), counts=dict(_COUNTS))

    monkeypatch.setattr(cli_module, "build_staging", fake_build)
    return captured


def test_cli_build_defaults(monkeypatch: pytest.MonkeyPatch, certificates_csv: Path) -> None:
    captured = _capture(monkeypatch)

    cli_module.main(["build", "--certificates", str(certificates_csv)])

    source = captured["certificates"]
    assert isinstance(source, CsvCertificateSource)
    assert source.path == certificates_csv
    assert source.active_only is True
    assert captured["schedules"] is None
    assert captured["excluded_groups"] is None
    assert captured["groups"] is None
    assert captured["entropy_from_env"] is True
    assert captured["dry_run"] is False
    assert captured["replace"] is True


def test_cli_build_with_flags(
    monkeypatch: pytest.MonkeyPatch, certificates_csv: Path, tmp_path: Path
) -> None:
    captured = _capture(monkeypatch)
    schedules = tmp_path / "schedules.csv"
    schedules.write_text("ScheduleId,ScheduleCode\n", encoding="utf-8")
    excluded = tmp_path / "excluded.txt"
    excluded.write_text("G9\n", encoding="utf-8")

    cli_module.main(
        [
            "-v",
            "build",
            "--certificates",
            str(certificates_csv),
            "--schedules",
            str(schedules),
            "--exclude-groups",
            str(excluded),
            "--group",
            "G1",
            "--group",
            "G2",
            "--database-uri",
            "sqlite+pysqlite:///:memory:",
            "--include-inactive",
            "--append",
            "--dry-run",
            "--no-entropy",
        ]
    )

    assert isinstance(captured["schedules"], CsvScheduleSource)
    assert isinstance(captured["excluded_groups"], TextGroupListSource)
    certificates = captured["certificates"]
    assert isinstance(certificates, CsvCertificateSource)
    assert certificates.active_only is False
    assert captured["groups"] == ["G1", "G2"]
    assert captured["database_uri"] == "sqlite+pysqlite:///:memory:"
    assert captured["entropy_from_env"] is False
    assert captured["dry_run"] is True
    assert captured["replace"] is False


def test_cli_missing_file_exits_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["build", "--certificates", str(tmp_path / "missing.csv")])

    assert excinfo.value.code == 2


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_cli_configuration_error_exits_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, certificates_csv: Path
) -> None:
    def failing_build(**_: object) -> BuildReport:
        raise MissingConfigurationError("Missing configuration for: X")

    monkeypatch.setattr(cli_module, "build_staging", failing_build)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["build", "--certificates", str(certificates_csv)])

    assert excinfo.value.code == 2


def test_cli_fatal_build_error_exits_with_failure(
    monkeypatch: pytest.MonkeyPatch, certificates_csv: Path
) -> None:
    def failing_build(**_: object) -> BuildReport:
        raise RuntimeError("boom")

    monkeypatch.setattr(cli_module, "build_staging", failing_build)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["build", "--certificates", str(certificates_csv)])

    assert excinfo.value.code == 1
