"""
Pointer Engine — Gentler touchpad and mouse.
Wayland gets the scroll-throttle shell extension, X11 gets imwheel.
"""

from pathlib import Path

from theming.commands import is_wayland
from theming.extensions import SCROLL_THROTTLE_UUID

TOUCHPAD = "org.gnome.desktop.peripherals.touchpad"
MOUSE = "org.gnome.desktop.peripherals.mouse"

IMWHEELRC = """\
".*"
None,Up,Button4,1
None,Down,Button5,1
Shift_L,Up,Button4,1
Shift_L,Down,Button5,1
Control_L,Up,Button4,1
Control_L,Down,Button5,1
"""

IMWHEEL_AUTOSTART = """\
[Desktop Entry]
Type=Application
Name=imwheel
Exec=sh -c '[ "${XDG_SESSION_TYPE}" = "x11" ] && imwheel -b "4 5" -d'
X-GNOME-Autostart-enabled=true
"""


class PointerEngine:
    """Configure peripherals and install the session-appropriate scroll slowdown."""

    def __init__(self, settings, manifest: dict, extensions, home=None, wayland=None):
        self.settings = settings
        self.touchpad = manifest.get("touchpad", {})
        self.extensions = extensions
        self.home = Path(home) if home else Path.home()
        self.wayland = is_wayland() if wayland is None else wayland

    def apply_peripherals(self):
        t = self.touchpad
        s = self.settings
        s.set_try(TOUCHPAD, "speed", t.get("speed", 0.03))
        s.set_try(TOUCHPAD, "tap-to-click", t.get("tap_to_click", True))
        s.set_try(TOUCHPAD, "natural-scroll", t.get("natural_scroll", True))
        s.set_try(TOUCHPAD, "two-finger-scrolling-enabled", True)
        s.set_try(TOUCHPAD, "click-method", "fingers")
        s.set_try(MOUSE, "speed", t.get("mouse_speed", 0.0))
        s.set_try(MOUSE, "natural-scroll", t.get("natural_scroll", True))

    def write_imwheel(self):
        rc = self.home / ".imwheelrc"
        rc.write_text(IMWHEELRC)
        autostart = self.home / ".config" / "autostart"
        autostart.mkdir(parents=True, exist_ok=True)
        (autostart / "imwheel.desktop").write_text(IMWHEEL_AUTOSTART)
        print(f"  → {rc} + autostart entry written")

    def apply(self):
        print("⚙️  Setting gentler trackpad & mouse...")
        self.apply_peripherals()

        if self.wayland:
            print("  → Wayland session: installing scroll throttle extension")
            self.extensions.install_scroll_throttle()
            self.extensions.enable(SCROLL_THROTTLE_UUID)
        else:
            print("  → X11 session: configuring imwheel")
            self.write_imwheel()
