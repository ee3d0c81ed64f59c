"""
Day/Night Engine — Switches theme, color scheme and wallpaper by time of day.
Invoked every few minutes by a systemd user timer (see theming.systemd).
"""

import enum
import logging
from datetime import datetime
from pathlib import Path

log = logging.getLogger(__name__)

INTERFACE = "org.gnome.desktop.interface"
USER_THEME = "org.gnome.shell.extensions.user-theme"
BACKGROUND = "org.gnome.desktop.background"


class Appearance(enum.Enum):
    DAY = "day"
    NIGHT = "night"


def is_day(hour, day_start, night_start):
    """
    True if `hour` falls in the day period.

    When night_start <= day_start the night period wraps past midnight,
    e.g. day_start=19, night_start=7 makes 19:00-06:59 the day.
    """
    if night_start > day_start:
        return day_start <= hour < night_start
    return not (night_start <= hour < day_start)


def appearance_for(hour, day_start, night_start):
    return Appearance.DAY if is_day(hour, day_start, night_start) else Appearance.NIGHT


class AppearanceScheduler:
    """Apply the day or night look to the settings store."""

    def __init__(self, settings, manifest: dict):
        self.settings = settings
        config = manifest.get("daynight", {})
        self.day_start = config.get("day_start_hour", 7)
        self.night_start = config.get("night_start_hour", 19)
        self.light_theme = config.get("light_theme", "WhiteSur-Light")
        self.dark_theme = config.get("dark_theme", "WhiteSur-Dark")
        self.wallpaper_dir = Path(config.get("wallpaper_dir", "~/Pictures/DynamicWallpapers")).expanduser()
        self.day_wallpaper = config.get("day_wallpaper", "day.jpg")
        self.night_wallpaper = config.get("night_wallpaper", "night.jpg")

    def current(self, now=None):
        now = now or datetime.now()
        return appearance_for(now.hour, self.day_start, self.night_start)

    def wallpaper_for(self, appearance):
        name = self.day_wallpaper if appearance is Appearance.DAY else self.night_wallpaper
        return self.wallpaper_dir / name

    def apply(self, now=None):
        """Write the keys for the current period. Never raises."""
        appearance = self.current(now)
        day = appearance is Appearance.DAY
        theme = self.light_theme if day else self.dark_theme

        self._write(INTERFACE, "gtk-theme", theme)
        self._write(USER_THEME, "name", theme)
        self._write(INTERFACE, "color-scheme", "prefer-light" if day else "prefer-dark")

        image = self.wallpaper_for(appearance)
        if image.is_file():
            uri = image.resolve().as_uri()
            self._write(BACKGROUND, "picture-uri", uri)
            self._write(BACKGROUND, "picture-uri-dark", uri)
        else:
            log.info("wallpaper_missing path=%s appearance=%s", image, appearance.value)

        log.info("appearance_applied appearance=%s theme=%s", appearance.value, theme)
        return appearance

    def _write(self, schema, key, value):
        try:
            return self.settings.set(schema, key, value)
        except Exception as e:
            log.warning("setting_failed schema=%s key=%s err=%s", schema, key, e)
            return False
