"""
Manifest handling — defaults, YAML loading, validation.
A manifest is a plain nested dict; engines read their own section with .get().
"""

import copy
from pathlib import Path

import yaml


class ConfigError(ValueError):
    """Raised when a manifest value is out of range or has the wrong type."""


DEFAULTS = {
    "daynight": {
        "day_start_hour": 7,
        "night_start_hour": 19,
        "light_theme": "WhiteSur-Light",
        "dark_theme": "WhiteSur-Dark",
        "wallpaper_dir": "~/Pictures/DynamicWallpapers",
        "day_wallpaper": "day.jpg",
        "night_wallpaper": "night.jpg",
        "wallpaper_pool": "~/Pictures/Wallpapers",
        "interval_minutes": 10,
        "boot_delay_minutes": 1,
    },
    "scroll": {
        # Pass 1 of N scroll events, and never two closer than min_interval_ms
        "every_nth": 3,
        "min_interval_ms": 18,
    },
    "bounce": {
        "cycles": 2,
        "scale": 1.24,
        "duration_ms": 170,
        "retry_delay_ms": 120,
    },
    "dock": {
        "position": "BOTTOM",
        "icon_size": 48,
        "opacity": 0.22,
        "shrink": True,
    },
    "night_light": {
        "enabled": True,
        "percent": 25,
    },
    "touchpad": {
        "speed": 0.03,
        "tap_to_click": True,
        "natural_scroll": True,
        "mouse_speed": 0.0,
    },
    "interface": {
        "icon_theme": "WhiteSur",
        "cursor_theme": "WhiteSur-cursors",
        "cursor_size": 24,
        "button_layout": "close,minimize,maximize:",
        "center_new_windows": True,
    },
    "favorites": [
        "org.gnome.Nautilus.desktop",
        "firefox.desktop",
        "org.gnome.Terminal.desktop",
        "org.gnome.Settings.desktop",
        "org.gnome.Software.desktop",
    ],
    "extensions": [
        "dash-to-dock@micxgx.gmail.com",
        "appindicatorsupport@rgcjonas.gmail.com",
        "user-theme@gnome-shell-extensions.gcampax.github.com",
        "caffeine@patapon.info",
        "sound-output-device-chooser@kgshank.net",
        "gsconnect@andyholmes.github.io",
        "bluetooth-quick-connect@bjarosze.gmail.com",
    ],
    "shell_versions": ["45", "46", "47", "48", "49", "50"],
}


def merge(base, override):
    """Recursively merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def default_manifest():
    return copy.deepcopy(DEFAULTS)


def load_config(path):
    """Load a YAML manifest, merge it over the defaults and validate it."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    manifest = merge(DEFAULTS, data)
    validate_config(manifest)
    return manifest


def save_config(manifest, path):
    save_path = Path(path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    with open(save_path, "w") as f:
        yaml.dump(manifest, f, default_flow_style=False, sort_keys=False)
    return save_path


SECTIONS = ("daynight", "scroll", "bounce", "dock", "night_light", "touchpad", "interface")


def _int_in(section, key, low, high):
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ConfigError(f"{key} must be between {low} and {high}, got {value}")
    return value


def _positive(section, key):
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{key} must be a positive number, got {value!r}")
    return value


def validate_config(manifest):
    """Reject values the engines can't act on. Raises ConfigError."""
    for name in SECTIONS:
        if not isinstance(manifest.get(name), dict):
            raise ConfigError(f"{name} must be a mapping")

    daynight = manifest.get("daynight", {})
    _int_in(daynight, "day_start_hour", 0, 23)
    _int_in(daynight, "night_start_hour", 0, 23)
    _int_in(daynight, "interval_minutes", 1, 24 * 60)
    _int_in(daynight, "boot_delay_minutes", 0, 24 * 60)
    for key in ("light_theme", "dark_theme", "wallpaper_dir", "day_wallpaper", "night_wallpaper"):
        if not isinstance(daynight.get(key), str) or not daynight.get(key):
            raise ConfigError(f"daynight.{key} must be a non-empty string")

    scroll = manifest.get("scroll", {})
    _int_in(scroll, "every_nth", 1, 1000)
    _int_in(scroll, "min_interval_ms", 0, 10_000)

    bounce = manifest.get("bounce", {})
    _int_in(bounce, "cycles", 1, 20)
    _positive(bounce, "scale")
    _positive(bounce, "duration_ms")
    _int_in(bounce, "retry_delay_ms", 0, 10_000)

    dock = manifest.get("dock", {})
    _int_in(dock, "icon_size", 8, 256)
    opacity = dock.get("opacity")
    if isinstance(opacity, bool) or not isinstance(opacity, (int, float)) or not 0 <= opacity <= 1:
        raise ConfigError(f"opacity must be between 0 and 1, got {opacity!r}")

    _int_in(manifest.get("night_light", {}), "percent", 0, 100)

    for key in ("favorites", "extensions", "shell_versions"):
        value = manifest.get(key)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{key} must be a list of strings")

    return manifest
