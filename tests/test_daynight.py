"""Tests for the day/night appearance switcher."""

from datetime import datetime

import pytest

from conftest import RecordingSettings
from theming.config import default_manifest
from theming.daynight import (
    BACKGROUND, INTERFACE, USER_THEME, Appearance, AppearanceScheduler, is_day,
)


def make_manifest(tmp_path, **overrides):
    manifest = default_manifest()
    manifest["daynight"]["wallpaper_dir"] = str(tmp_path)
    manifest["daynight"].update(overrides)
    return manifest


# ------------------------------------------------------------------
# is_day
# ------------------------------------------------------------------

@pytest.mark.parametrize("hour, expected", [(6, False), (7, True), (8, True), (18, True), (19, False), (20, False)])
def test_is_day_regular_boundaries(hour, expected):
    assert is_day(hour, 7, 19) is expected


def test_is_day_inverted_boundaries_wrap_past_midnight():
    assert is_day(8, 19, 7) is False
    assert is_day(20, 19, 7) is True
    assert is_day(3, 19, 7) is True
    assert is_day(7, 19, 7) is False
    assert is_day(19, 19, 7) is True


def test_is_day_equal_boundaries_is_always_day():
    assert all(is_day(h, 9, 9) for h in range(24))


def test_is_day_is_stable():
    results = {is_day(h, 7, 19) for _ in range(5) for h in [12]}
    assert results == {True}


# ------------------------------------------------------------------
# AppearanceScheduler
# ------------------------------------------------------------------

def test_day_writes_light_theme_and_wallpaper(tmp_path):
    (tmp_path / "day.jpg").write_bytes(b"jpg")
    settings = RecordingSettings()
    scheduler = AppearanceScheduler(settings, make_manifest(tmp_path))

    result = scheduler.apply(datetime(2024, 5, 1, 8, 30))

    assert result is Appearance.DAY
    uri = (tmp_path / "day.jpg").resolve().as_uri()
    assert settings.values == {
        (INTERFACE, "gtk-theme"): "WhiteSur-Light",
        (USER_THEME, "name"): "WhiteSur-Light",
        (INTERFACE, "color-scheme"): "prefer-light",
        (BACKGROUND, "picture-uri"): uri,
        (BACKGROUND, "picture-uri-dark"): uri,
    }


def test_night_with_missing_image_skips_background_only(tmp_path):
    settings = RecordingSettings()
    scheduler = AppearanceScheduler(settings, make_manifest(tmp_path))

    result = scheduler.apply(datetime(2024, 5, 1, 22, 0))

    assert result is Appearance.NIGHT
    assert settings.values[(INTERFACE, "gtk-theme")] == "WhiteSur-Dark"
    assert settings.values[(USER_THEME, "name")] == "WhiteSur-Dark"
    assert settings.values[(INTERFACE, "color-scheme")] == "prefer-dark"
    assert not any(schema == BACKGROUND for schema, _, _ in settings.writes)


def test_apply_is_idempotent(tmp_path):
    (tmp_path / "night.jpg").write_bytes(b"jpg")
    settings = RecordingSettings()
    scheduler = AppearanceScheduler(settings, make_manifest(tmp_path))
    now = datetime(2024, 5, 1, 23, 0)

    scheduler.apply(now)
    first = list(settings.writes)
    scheduler.apply(now)

    assert settings.writes == first + first


def test_failed_write_does_not_stop_the_others(tmp_path):
    settings = RecordingSettings(fail_keys={(INTERFACE, "gtk-theme")})
    scheduler = AppearanceScheduler(settings, make_manifest(tmp_path))

    scheduler.apply(datetime(2024, 5, 1, 12, 0))

    assert (INTERFACE, "color-scheme") in settings.values
    assert (USER_THEME, "name") in settings.values


def test_raising_store_never_propagates(tmp_path):
    class BrokenStore:
        def set(self, schema, key, value):
            raise OSError("dbus is gone")

    scheduler = AppearanceScheduler(BrokenStore(), make_manifest(tmp_path))
    assert scheduler.apply(datetime(2024, 5, 1, 12, 0)) is Appearance.DAY


def test_inverted_boundaries_from_manifest(tmp_path):
    settings = RecordingSettings()
    manifest = make_manifest(tmp_path, day_start_hour=19, night_start_hour=7)
    scheduler = AppearanceScheduler(settings, manifest)

    assert scheduler.current(datetime(2024, 5, 1, 8, 0)) is Appearance.NIGHT
    assert scheduler.current(datetime(2024, 5, 1, 20, 0)) is Appearance.DAY
