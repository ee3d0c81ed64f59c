"""Tests for the day/night timer units."""

from pathlib import Path
from unittest.mock import patch

from conftest import FakeRunner
from theming.config import default_manifest
from theming.systemd import SCRIPT, UNIT_NAME, TimerEngine, switcher_command


@patch("theming.systemd.shutil.which", return_value="/usr/bin/macosify")
def test_switcher_command_uses_installed_script(_which, tmp_path):
    config = tmp_path / "macosify.yaml"
    assert switcher_command(config) == f"/usr/bin/macosify --daynight -c {config.resolve()}"


@patch("theming.systemd.shutil.which", return_value=None)
@patch("theming.systemd.sys.executable", "/usr/bin/python3")
def test_switcher_command_runs_checkout_script(_which):
    script = Path(__file__).resolve().parent.parent / "macosify.py"
    assert SCRIPT == script
    assert switcher_command() == f"/usr/bin/python3 {script} --daynight"


@patch("theming.systemd.shutil.which", return_value=None)
def test_service_unit_from_checkout_runs_outside_it(_which, tmp_path):
    unit = TimerEngine(default_manifest(), config_path=tmp_path / "m.yaml", unit_dir=tmp_path).service_unit()

    exec_start = next(line for line in unit.splitlines() if line.startswith("ExecStart="))
    assert " -m " not in exec_start
    assert f"{SCRIPT} --daynight -c {(tmp_path / 'm.yaml').resolve()}" in exec_start


@patch("theming.systemd.shutil.which", return_value=None)
@patch("theming.systemd.sys.executable", "/usr/bin/python3")
def test_switcher_command_falls_back_to_module(_which, tmp_path):
    assert switcher_command(script=tmp_path / "missing.py") == "/usr/bin/python3 -m macosify --daynight"


def test_timer_unit_uses_configured_cadence(tmp_path):
    manifest = default_manifest()
    manifest["daynight"].update(interval_minutes=15, boot_delay_minutes=2)
    unit = TimerEngine(manifest, unit_dir=tmp_path).timer_unit()

    assert "OnBootSec=2min" in unit
    assert "OnUnitActiveSec=15min" in unit
    assert f"Unit={UNIT_NAME}.service" in unit
    assert "WantedBy=default.target" in unit


def test_write_units(tmp_path):
    engine = TimerEngine(default_manifest(), unit_dir=tmp_path / "user")
    service, timer = engine.write_units()

    assert service.read_text().startswith("[Unit]")
    assert "Type=oneshot" in service.read_text()
    assert "--daynight" in service.read_text()
    assert timer.name == f"{UNIT_NAME}.timer"


def test_enable_reloads_then_enables(tmp_path):
    runner = FakeRunner()
    assert TimerEngine(default_manifest(), unit_dir=tmp_path, runner=runner).enable() is True
    assert runner.calls == [
        ["systemctl", "--user", "daemon-reload"],
        ["systemctl", "--user", "enable", "--now", f"{UNIT_NAME}.timer"],
    ]


def test_enable_stops_at_first_failure(tmp_path):
    runner = FakeRunner(default=(1, "", "Failed to connect to bus"))
    assert TimerEngine(default_manifest(), unit_dir=tmp_path, runner=runner).enable() is False
    assert len(runner.calls) == 1
