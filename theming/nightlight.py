"""
Night Light Engine — Applies a warm color temperature and makes it stick.
"""

import logging
import time

from theming.commands import run_cmd

log = logging.getLogger(__name__)

COLOR = "org.gnome.settings-daemon.plugins.color"
NEUTRAL_TEMP = 6500
WARMEST_TEMP = 2000


def percent_to_temperature(percent):
    """0% is neutral 6500K, 100% is 2000K."""
    p = max(0, min(100, int(percent)))
    return NEUTRAL_TEMP - (p * (NEUTRAL_TEMP - WARMEST_TEMP)) // 100


def percent_to_strength(percent):
    p = max(0, min(100, int(percent)))
    return round(p / 100, 2)


class NightLightEngine:
    """
    Two-phase apply: force an always-on schedule so the temperature takes
    effect now, restart the color daemon, then go back to the automatic
    schedule and reassert the temperature if GNOME reset it.
    """

    def __init__(self, settings, manifest: dict, runner=run_cmd, sleep=time.sleep):
        self.settings = settings
        config = manifest.get("night_light", {})
        self.enabled = config.get("enabled", True)
        self.percent = config.get("percent", 25)
        self.temperature = percent_to_temperature(self.percent)
        self.strength = percent_to_strength(self.percent)
        self.runner = runner
        self.sleep = sleep

    def apply(self):
        if not self.enabled:
            print("  → Night light left untouched (disabled in config)")
            return True

        print(f"⚙️  Applying Night Light ≈{self.percent}% ({self.temperature}K)...")
        s = self.settings
        s.set(COLOR, "night-light-enabled", True)
        s.set(COLOR, "night-light-schedule-automatic", False)
        s.set(COLOR, "night-light-schedule-from", 0.0)
        s.set(COLOR, "night-light-schedule-to", 24.0)
        s.set(COLOR, "night-light-temperature", self.temperature)
        if s.has_key(COLOR, "night-light-strength"):
            s.set(COLOR, "night-light-strength", self.strength)

        result = self.runner(
            ["systemctl", "--user", "restart", "org.gnome.SettingsDaemon.Color.service"]
        )
        if result.returncode != 0:
            log.info("color_daemon_restart_failed err=%s", result.stderr.strip())
        self.sleep(1)

        s.set(COLOR, "night-light-schedule-automatic", True)
        current = s.get(COLOR, "night-light-temperature") or str(NEUTRAL_TEMP)
        if str(NEUTRAL_TEMP) in current:
            s.set(COLOR, "night-light-temperature", self.temperature)
            print("  → Temperature reasserted")

        print("  ✅ Night light applied")
        return True
