"""
Timer Engine — Schedules the day/night switcher with a systemd user timer.
"""

import logging
import shlex
import shutil
import sys
from pathlib import Path

from theming.commands import run_cmd

log = logging.getLogger(__name__)

UNIT_DIR = Path("~/.config/systemd/user")
UNIT_NAME = "macosify-daynight"
# Installed beside theming/ both in a checkout and in site-packages
SCRIPT = Path(__file__).resolve().parent.parent / "macosify.py"


def switcher_command(config_path=None, script=SCRIPT):
    """Command line the service runs for one day/night pass."""
    exe = shutil.which("macosify")
    if exe:
        cmd = [exe]
    elif Path(script).is_file():
        # The unit does not run from the checkout, so -m would not find it
        cmd = [sys.executable, str(Path(script).resolve())]
    else:
        cmd = [sys.executable, "-m", "macosify"]
    cmd.append("--daynight")
    if config_path:
        cmd += ["-c", str(Path(config_path).expanduser().resolve())]
    return " ".join(shlex.quote(part) for part in cmd)


class TimerEngine:
    """Write and enable the oneshot service + timer pair."""

    def __init__(self, manifest: dict, config_path=None, unit_dir=None, runner=run_cmd):
        daynight = manifest.get("daynight", {})
        self.interval_minutes = daynight.get("interval_minutes", 10)
        self.boot_delay_minutes = daynight.get("boot_delay_minutes", 1)
        self.config_path = config_path
        self.unit_dir = Path(unit_dir or UNIT_DIR).expanduser()
        self.runner = runner

    def service_unit(self):
        return (
            "[Unit]\n"
            "Description=macOS-like day/night theme & wallpaper switcher\n"
            "\n"
            "[Service]\n"
            "Type=oneshot\n"
            f"ExecStart={switcher_command(self.config_path)}\n"
        )

    def timer_unit(self):
        return (
            "[Unit]\n"
            f"Description=Run day/night switch every {self.interval_minutes} minutes\n"
            "\n"
            "[Timer]\n"
            f"OnBootSec={self.boot_delay_minutes}min\n"
            f"OnUnitActiveSec={self.interval_minutes}min\n"
            f"Unit={UNIT_NAME}.service\n"
            "\n"
            "[Install]\n"
            "WantedBy=default.target\n"
        )

    def write_units(self):
        self.unit_dir.mkdir(parents=True, exist_ok=True)
        service = self.unit_dir / f"{UNIT_NAME}.service"
        timer = self.unit_dir / f"{UNIT_NAME}.timer"
        service.write_text(self.service_unit())
        timer.write_text(self.timer_unit())
        print(f"  → {service}")
        print(f"  → {timer}")
        return service, timer

    def enable(self):
        """daemon-reload, then enable --now the timer. Returns True on success."""
        for cmd in (
            ["systemctl", "--user", "daemon-reload"],
            ["systemctl", "--user", "enable", "--now", f"{UNIT_NAME}.timer"],
        ):
            result = self.runner(cmd)
            if result.returncode != 0:
                log.warning("systemctl_failed cmd=%s err=%s", " ".join(cmd), result.stderr.strip())
                print(f"  ⚠️  {' '.join(cmd)} failed: {result.stderr.strip()[:200]}")
                return False
        print(f"  → {UNIT_NAME}.timer enabled ({self.interval_minutes}m cadence)")
        return True

    def apply(self):
        self.write_units()
        return self.enable()
