"""
Desktop Engine — Applies the static macOS-like desktop settings.
Handles: third-party extensions, Dash-to-Dock, interface look, favorites.
"""

from pathlib import Path

from theming.commands import command_exists, run_cmd

INTERFACE = "org.gnome.desktop.interface"
USER_THEME = "org.gnome.shell.extensions.user-theme"
DASH_TO_DOCK = "org.gnome.shell.extensions.dash-to-dock"
WM_PREFERENCES = "org.gnome.desktop.wm.preferences"
MUTTER = "org.gnome.mutter"
SHELL = "org.gnome.shell"

APPLICATION_DIRS = [
    Path("/usr/share/applications"),
    Path("~/.local/share/applications"),
    Path("/var/lib/flatpak/exports/share/applications"),
]


class DesktopEngine:
    """Configure dock, interface and favorites."""

    # Fixed Dash-to-Dock keys; size/opacity/position come from the manifest
    DOCK_SETTINGS = {
        "dock-fixed": True,
        "autohide": False,
        "intellihide": False,
        "show-trash": True,
        "show-mounts": False,
        "transparency-mode": "FIXED",
        "apply-custom-theme": True,
    }

    def __init__(self, settings, manifest: dict, runner=run_cmd, application_dirs=None):
        self.settings = settings
        self.manifest = manifest
        self.dock = manifest.get("dock", {})
        self.interface = manifest.get("interface", {})
        self.daynight = manifest.get("daynight", {})
        self.extensions = manifest.get("extensions", [])
        self.favorites = manifest.get("favorites", [])
        self.runner = runner
        self.application_dirs = [
            Path(d).expanduser() for d in (application_dirs or APPLICATION_DIRS)
        ]

    def get_dock_settings(self):
        settings = {
            "dock-position": self.dock.get("position", "BOTTOM"),
            "dash-max-icon-size": self.dock.get("icon_size", 48),
            "background-opacity": self.dock.get("opacity", 0.22),
        }
        settings.update(self.DOCK_SETTINGS)
        if self.dock.get("shrink", True):
            settings["custom-theme-shrink"] = True
        return settings

    def get_interface_settings(self):
        """(schema, key, value) triples for the look & feel."""
        light = self.daynight.get("light_theme", "WhiteSur-Light")
        i = self.interface
        return [
            (INTERFACE, "gtk-theme", light),
            (INTERFACE, "icon-theme", i.get("icon_theme", "WhiteSur")),
            (INTERFACE, "cursor-theme", i.get("cursor_theme", "WhiteSur-cursors")),
            (INTERFACE, "cursor-size", i.get("cursor_size", 24)),
            (USER_THEME, "name", light),
            (WM_PREFERENCES, "button-layout", i.get("button_layout", "close,minimize,maximize:")),
            (MUTTER, "center-new-windows", i.get("center_new_windows", True)),
            (INTERFACE, "color-scheme", "prefer-light"),
        ]

    def installed_favorites(self):
        """Favorites whose .desktop file exists somewhere on the system."""
        return [
            desktop_id for desktop_id in self.favorites
            if any((d / desktop_id).is_file() for d in self.application_dirs)
        ]

    def enable_extensions(self):
        if not command_exists("gnome-extensions"):
            print("  ⚠️  gnome-extensions not found, skipping extension enable")
            return []
        enabled = []
        for uuid in self.extensions:
            if self.runner(["gnome-extensions", "enable", uuid]).returncode == 0:
                enabled.append(uuid)
            else:
                print(f"  ⚠️  {uuid} not installed or failed to enable")
        print(f"  → {len(enabled)}/{len(self.extensions)} extensions enabled")
        return enabled

    def apply(self):
        print("⚙️  Configuring Dash-to-Dock, interface & favorites...")
        self.enable_extensions()

        for key, value in self.get_dock_settings().items():
            self.settings.set_try(DASH_TO_DOCK, key, value)

        for schema, key, value in self.get_interface_settings():
            self.settings.set_try(schema, key, value)

        favorites = self.installed_favorites()
        if favorites:
            self.settings.set_try(SHELL, "favorite-apps", favorites)
            print(f"  → Favorites: {', '.join(favorites)}")

        print("  ✅ Desktop configured")
