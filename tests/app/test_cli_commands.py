from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from rich.console import Console
from typer.testing import CliRunner

from filter_updater.app import AppState, app
from filter_updater.config import ConfigLocator, ConfigRepository
from filter_updater.logging_conf import configure_logging

ADS = "https://lists.example.com/ads.txt"


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("FILTER_UPDATER_HOME", str(tmp_path))
    monkeypatch.setattr("filter_updater.app.configure_logging", lambda **kwargs: None)
    monkeypatch.setattr("filter_updater.app.console", Console(width=200))
    return tmp_path


def test_init_writes_config(home: Path) -> None:
    result = CliRunner().invoke(app, ["init"])
    assert result.exit_code == 0, result.stdout
    config_path = home / "data" / "updater.yaml"
    assert config_path.exists()
    assert "Configuration written" in result.stdout


def test_list_shows_configured_filters(home: Path) -> None:
    config_path = home / "data" / "updater.yaml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump({"filters": [{"id": 1700000000, "name": "Ads", "url": ADS}]}),
        encoding="utf-8",
    )
    filters_dir = home / "data" / "filters"
    filters_dir.mkdir(parents=True, exist_ok=True)
    (filters_dir / "1700000000.txt").write_bytes(b"rule-1\nrule-2\n")

    result = CliRunner().invoke(app, ["list"])

    assert result.exit_code == 0, result.stdout
    assert "Ads" in result.stdout
    assert "1700000000" in result.stdout


def test_refresh_runs_one_cycle(home: Path, monkeypatch: pytest.MonkeyPatch, make_updater, upstream) -> None:
    upstream.routes[ADS] = (200, b"rule\n")
    updater = make_updater(filters=[{"id": 1700000000, "name": "Ads", "url": ADS}])
    updater.load_filters()
    state = AppState(repository=ConfigRepository(), updater=updater)
    monkeypatch.setattr("filter_updater.app.build_state", lambda verbose: state)

    result = CliRunner().invoke(app, ["refresh"])

    assert result.exit_code == 0, result.stdout
    assert "Refresh results" in result.stdout
    assert upstream.requested == [ADS]
    assert updater.path_for(updater.filters()[0]).read_bytes() == b"rule\n"


@pytest.fixture
def logged_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("FILTER_UPDATER_HOME", str(tmp_path))
    monkeypatch.setattr("filter_updater.app.console", Console(width=200))
    logs_dir = ConfigLocator().logs_dir
    configure_logging(log_dir=logs_dir, console=False)
    return logs_dir


def test_log_show_reads_updater_and_filter_logs(logged_home: Path, make_updater, upstream) -> None:
    upstream.routes[ADS] = (200, b"rule\n")
    entry = make_updater().add_filter("Ads", ADS)

    runner = CliRunner()
    overall = runner.invoke(app, ["log", "show", "--tail", "5"])
    per_filter = runner.invoke(app, ["log", "show", "--filter", str(entry.id)])
    listed = runner.invoke(app, ["log", "list"])

    assert overall.exit_code == 0, overall.stdout
    assert "updater.log" in overall.stdout
    assert "filter_added" in overall.stdout
    assert per_filter.exit_code == 0, per_filter.stdout
    assert f"{entry.id}.log" in per_filter.stdout
    assert "filter_added" in per_filter.stdout
    assert listed.exit_code == 0, listed.stdout
    assert str(entry.id) in listed.stdout


def test_log_show_without_entries(logged_home: Path) -> None:
    result = CliRunner().invoke(app, ["log", "show", "--filter", "42"])
    assert result.exit_code == 0, result.stdout
    assert "No log entries yet." in result.stdout
