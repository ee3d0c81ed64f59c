"""
Extension Engine — Generates and installs the GNOME Shell extensions that
carry the scroll throttle and the launch bounce into the running shell.

The extensions are ES modules (GNOME 45+); tunables from the manifest are
baked into extension.js at generation time.
"""

import json
import logging
import shutil
from pathlib import Path
from string import Template

from theming.commands import command_exists, run_cmd

log = logging.getLogger(__name__)

EXTENSIONS_DIR = Path("~/.local/share/gnome-shell/extensions")
URL = "https://local.macosify"

SCROLL_THROTTLE_UUID = "scroll-throttle@local.macosify"
DOCK_BOUNCE_UUID = "dock-bounce@local.macosify"


SCROLL_THROTTLE_JS = Template("""\
import Clutter from 'gi://Clutter';
import GLib from 'gi://GLib';
import {Extension} from 'resource:///org/gnome/shell/extensions/extension.js';

const EVERY_NTH = $every_nth;
const MIN_INTERVAL_MS = $min_interval_ms;

export default class ScrollThrottleExtension extends Extension {
    enable() {
        // Fresh state per activation
        this._counter = 0;
        this._lastKept = null;
        this._handlerId = global.stage.connect('captured-event', (_actor, event) => {
            if (event.type() !== Clutter.EventType.SCROLL)
                return Clutter.EVENT_PROPAGATE;
            const now = GLib.get_monotonic_time() / 1000;
            if (this._lastKept !== null && now - this._lastKept < MIN_INTERVAL_MS)
                return Clutter.EVENT_STOP;
            this._counter = (this._counter + 1) % EVERY_NTH;
            if (this._counter !== 0)
                return Clutter.EVENT_STOP;
            this._lastKept = now;
            return Clutter.EVENT_PROPAGATE;
        });
    }

    disable() {
        if (this._handlerId) {
            global.stage.disconnect(this._handlerId);
            this._handlerId = null;
        }
        this._counter = 0;
        this._lastKept = null;
    }
}
""")


DOCK_BOUNCE_JS = Template("""\
import Clutter from 'gi://Clutter';
import GLib from 'gi://GLib';
import Shell from 'gi://Shell';
import * as Main from 'resource:///org/gnome/shell/ui/main.js';
import {Extension} from 'resource:///org/gnome/shell/extensions/extension.js';

const SCALE = $scale;
const DURATION = $duration_ms;
const CYCLES = $cycles;
const RETRY_DELAY_MS = $retry_delay_ms;

function iconActor(icon) {
    return icon.iconActor || icon.actor || icon;
}

function fromIconList(icons, app) {
    if (!Array.isArray(icons))
        return null;
    const icon = icons.find(i => i.app === app);
    return icon ? iconActor(icon) : null;
}

// Dock-like extensions first (Dash-to-Dock), then the overview dash
function locateIcon(app) {
    for (const ext of Main.extensionManager._extensions.values()) {
        const actor = fromIconList(ext?.stateObj?.dock?._appIcons, app);
        if (actor)
            return actor;
    }
    return fromIconList(Main.overview?.dash?._appIcons, app);
}

export default class DockBounceExtension extends Extension {
    enable() {
        this._generation = (this._generation || 0) + 1;
        this._bouncing = new Set();
        this._sources = new Set();
        const appSystem = Shell.AppSystem.get_default();
        this._handlerId = appSystem.connect('app-state-changed', (_sys, app) => {
            if (app.state !== Shell.AppState.STARTING)
                return;
            const actor = locateIcon(app);
            if (actor) {
                this._bounce(actor);
                return;
            }
            const sourceId = GLib.timeout_add(GLib.PRIORITY_DEFAULT, RETRY_DELAY_MS, () => {
                this._sources.delete(sourceId);
                const late = locateIcon(app);
                if (late)
                    this._bounce(late);
                return GLib.SOURCE_REMOVE;
            });
            this._sources.add(sourceId);
        });
    }

    disable() {
        Shell.AppSystem.get_default().disconnect(this._handlerId);
        this._handlerId = null;
        this._generation++;
        this._sources.forEach(id => GLib.source_remove(id));
        this._sources.clear();
        this._bouncing.forEach(actor => {
            actor.remove_all_transitions();
            actor.set_scale(1.0, 1.0);
        });
        this._bouncing.clear();
    }

    _bounce(actor) {
        if (this._bouncing.has(actor))
            return;
        this._bouncing.add(actor);
        const generation = this._generation;
        let remaining = CYCLES;
        const next = () => {
            if (generation !== this._generation)
                return;
            remaining--;
            if (remaining > 0)
                this._oneBounce(actor, next);
            else
                this._bouncing.delete(actor);
        };
        this._oneBounce(actor, next);
    }

    _oneBounce(actor, done) {
        actor.set_pivot_point(0.5, 1.0);
        actor.set_scale(1.0, 1.0);
        actor.ease({
            scale_x: SCALE, scale_y: SCALE, duration: DURATION,
            mode: Clutter.AnimationMode.EASE_OUT_BACK,
            onComplete: () => actor.ease({
                scale_x: 1.0, scale_y: 1.0, duration: DURATION,
                mode: Clutter.AnimationMode.EASE_OUT_BACK,
                onComplete: done,
            }),
        });
    }
}
""")


class ExtensionEngine:
    """Write the generated extensions and enable them."""

    def __init__(self, manifest: dict, extensions_dir=None, runner=run_cmd):
        self.manifest = manifest
        self.extensions_dir = Path(extensions_dir or EXTENSIONS_DIR).expanduser()
        self.shell_versions = manifest.get("shell_versions", ["45", "46", "47", "48", "49", "50"])
        self.runner = runner

    def metadata(self, uuid, name, description, version):
        return {
            "uuid": uuid,
            "name": name,
            "description": description,
            "version": version,
            "shell-version": list(self.shell_versions),
            "url": URL,
        }

    def render_scroll_throttle(self):
        scroll = self.manifest.get("scroll", {})
        return SCROLL_THROTTLE_JS.substitute(
            every_nth=int(scroll.get("every_nth", 3)),
            min_interval_ms=int(scroll.get("min_interval_ms", 18)),
        )

    def render_dock_bounce(self):
        bounce = self.manifest.get("bounce", {})
        return DOCK_BOUNCE_JS.substitute(
            scale=float(bounce.get("scale", 1.24)),
            duration_ms=int(bounce.get("duration_ms", 170)),
            cycles=int(bounce.get("cycles", 2)),
            retry_delay_ms=int(bounce.get("retry_delay_ms", 120)),
        )

    def install(self, uuid, metadata, source):
        """Replace the extension directory with fresh metadata.json + extension.js."""
        ext_dir = self.extensions_dir / uuid
        if ext_dir.exists():
            shutil.rmtree(ext_dir)
        ext_dir.mkdir(parents=True)
        (ext_dir / "metadata.json").write_text(json.dumps(metadata, indent=2) + "\n")
        (ext_dir / "extension.js").write_text(source)
        print(f"  → {uuid} written to {ext_dir}")
        return ext_dir

    def install_scroll_throttle(self):
        metadata = self.metadata(
            SCROLL_THROTTLE_UUID, "Scroll Throttle",
            "Slow smooth scrolling by event drop + time gating", 3,
        )
        return self.install(SCROLL_THROTTLE_UUID, metadata, self.render_scroll_throttle())

    def install_dock_bounce(self):
        metadata = self.metadata(
            DOCK_BOUNCE_UUID, "Dock Bounce",
            "mac-like bounce of the dock icon on app launch", 6,
        )
        return self.install(DOCK_BOUNCE_UUID, metadata, self.render_dock_bounce())

    def enable(self, uuid):
        if not command_exists("gnome-extensions"):
            print(f"  ⚠️  gnome-extensions not found, enable {uuid} manually")
            return False
        result = self.runner(["gnome-extensions", "enable", uuid])
        if result.returncode != 0:
            # A freshly written extension is only picked up after re-login on Wayland
            log.warning("extension_enable_failed uuid=%s err=%s", uuid, result.stderr.strip())
            print(f"  ⚠️  Could not enable {uuid} yet (log out and back in)")
            return False
        print(f"  → Enabled {uuid}")
        return True
