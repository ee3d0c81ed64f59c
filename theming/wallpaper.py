"""
Wallpaper Engine — Validates and repairs the day/night wallpapers.
A broken or missing image is replaced by a random pick from the pool.
"""

import logging
import random
import shutil
from pathlib import Path

from theming.commands import command_exists, run_cmd

log = logging.getLogger(__name__)

BACKGROUND = "org.gnome.desktop.background"
IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png"}


def is_image_ok(path, runner=run_cmd):
    """Check that path is a readable jpeg/png, using whatever tool is around."""
    path = Path(path)
    if not path.is_file():
        return False
    if command_exists("magick"):
        return runner(["magick", "identify", "-quiet", "-ping", str(path)]).returncode == 0
    if command_exists("identify"):
        return runner(["identify", "-quiet", "-ping", str(path)]).returncode == 0
    if path.stat().st_size == 0:
        return False
    result = runner(["file", "-b", "--mime-type", str(path)])
    return result.returncode == 0 and result.stdout.strip().lower() in ("image/jpeg", "image/png")


def find_images(pool_dir):
    pool = Path(pool_dir).expanduser()
    if not pool.is_dir():
        return []
    return sorted(p for p in pool.rglob("*") if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)


class WallpaperEngine:
    """Keep day.jpg / night.jpg valid and set the initial background."""

    def __init__(self, settings, manifest: dict, runner=run_cmd, rng=None):
        self.settings = settings
        config = manifest.get("daynight", {})
        self.dynamic_dir = Path(config.get("wallpaper_dir", "~/Pictures/DynamicWallpapers")).expanduser()
        self.pool_dir = Path(config.get("wallpaper_pool", "~/Pictures/Wallpapers")).expanduser()
        self.day_path = self.dynamic_dir / config.get("day_wallpaper", "day.jpg")
        self.night_path = self.dynamic_dir / config.get("night_wallpaper", "night.jpg")
        self.runner = runner
        self.rng = rng or random.Random()

    def pick(self):
        images = find_images(self.pool_dir)
        return self.rng.choice(images) if images else None

    def repair(self):
        """Replace invalid day/night images. Night falls back to the day image."""
        self.dynamic_dir.mkdir(parents=True, exist_ok=True)

        if not is_image_ok(self.day_path, self.runner):
            source = self.pick()
            if source:
                shutil.copyfile(source, self.day_path)
                print(f"  → Day wallpaper ← {source.name}")
            else:
                print(f"  ⚠️  No images in {self.pool_dir}, day wallpaper left as is")

        if not is_image_ok(self.night_path, self.runner):
            source = self.pick()
            if source is None and self.day_path.is_file():
                source = self.day_path
            if source:
                shutil.copyfile(source, self.night_path)
                print(f"  → Night wallpaper ← {source.name}")

    def set_background(self):
        if not self.day_path.is_file():
            log.info("wallpaper_missing path=%s", self.day_path)
            return False
        uri = self.day_path.resolve().as_uri()
        self.settings.set_try(BACKGROUND, "picture-uri", uri)
        self.settings.set_try(BACKGROUND, "picture-uri-dark", uri)
        self.settings.set_try(BACKGROUND, "picture-options", "zoom")
        return True

    def apply(self):
        print("⚙️  Preparing dynamic wallpapers...")
        self.repair()
        self.set_background()
