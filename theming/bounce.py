"""
Launch bounce — bounces an application's dock icon while it starts.

Docks register themselves as icon locators: any object with
locate_icon(app_id) returning an actor or None. Locators are asked in
registration order, so extension docks go before the overview dash.
"""

import logging
import weakref

from theming.shell import Actor, AnimationMode, AppState, AppSystem, Dock, MainLoop

log = logging.getLogger(__name__)


class LaunchBounce:
    """AppSystem listener running a scale-up/scale-down bounce on launch."""

    def __init__(self, app_system, loop, locators=(), scale=1.24, duration_ms=170,
                 cycles=2, retry_delay_ms=120):
        if cycles < 1:
            raise ValueError(f"cycles must be at least 1, got {cycles}")
        if scale <= 0 or duration_ms <= 0:
            raise ValueError("scale and duration_ms must be positive")
        self.app_system = app_system
        self.loop = loop
        self.locators = list(locators)
        self.scale = scale
        self.duration_ms = duration_ms
        self.cycles = cycles
        self.retry_delay_ms = retry_delay_ms
        self.bouncing = weakref.WeakSet()
        self._handler_id = None
        # Bumped on every disable; continuations from an older generation are stale
        self._generation = 0

    @classmethod
    def from_manifest(cls, app_system, loop, locators, manifest: dict):
        bounce = manifest.get("bounce", {})
        return cls(
            app_system, loop, locators,
            scale=bounce.get("scale", 1.24),
            duration_ms=bounce.get("duration_ms", 170),
            cycles=bounce.get("cycles", 2),
            retry_delay_ms=bounce.get("retry_delay_ms", 120),
        )

    def register_locator(self, locator):
        self.locators.append(locator)

    @property
    def enabled(self):
        return self._handler_id is not None

    def enable(self):
        if self.enabled:
            return
        self._handler_id = self.app_system.connect(self._on_app_state_changed)

    def disable(self):
        if self._handler_id is not None:
            self.app_system.disconnect(self._handler_id)
            self._handler_id = None
        self._generation += 1
        for actor in list(self.bouncing):
            actor.remove_all_transitions()
            actor.set_scale(1.0, 1.0)
        self.bouncing = weakref.WeakSet()

    def find_icon(self, app_id):
        for locator in self.locators:
            actor = locator.locate_icon(app_id)
            if actor is not None:
                return actor
        return None

    def _on_app_state_changed(self, _app_system, app):
        if app.state is not AppState.STARTING:
            return
        actor = self.find_icon(app.id)
        if actor is not None:
            self.bounce(actor)
            return

        # The dock may not have built the icon yet
        generation = self._generation

        def retry():
            if generation != self._generation:
                return
            late = self.find_icon(app.id)
            if late is None:
                log.debug("bounce_icon_missing app=%s", app.id)
                return
            self.bounce(late)

        self.loop.timeout_add_once(self.retry_delay_ms, retry)

    def bounce(self, actor):
        """Start a bounce on actor. Returns False if one is already running."""
        if actor in self.bouncing:
            return False
        self.bouncing.add(actor)
        generation = self._generation
        remaining = [self.cycles]

        def next_cycle():
            if generation != self._generation:
                return
            remaining[0] -= 1
            if remaining[0] > 0:
                self._one_bounce(actor, next_cycle)
            else:
                self.bouncing.discard(actor)

        self._one_bounce(actor, next_cycle)
        return True

    def _one_bounce(self, actor, done):
        actor.set_scale(1.0, 1.0)
        actor.ease(
            self.scale, self.scale, self.duration_ms,
            mode=AnimationMode.EASE_OUT_BACK,
            on_complete=lambda: actor.ease(
                1.0, 1.0, self.duration_ms,
                mode=AnimationMode.EASE_OUT_BACK,
                on_complete=done,
            ),
        )


def replay(launches, scale=1.24, duration_ms=170, cycles=2, retry_delay_ms=120):
    """
    Launch apps on an in-process dock at the given (app_id, ms) pairs and
    return every ease started as (ms, app_id, target_scale), in time order.
    """
    loop = MainLoop()
    apps = AppSystem()
    dock = Dock("preview")
    bounce = LaunchBounce(apps, loop, [dock], scale, duration_ms, cycles, retry_delay_ms)
    bounce.enable()

    icons = {}
    for app_id, _ in launches:
        if app_id not in icons:
            icons[app_id] = Actor(loop, app_id)
            dock.add_icon(app_id, icons[app_id])

    for app_id, ts in sorted(launches, key=lambda launch: launch[1]):
        loop.advance_to(ts)
        apps.set_state(app_id, AppState.STARTING)
    loop.advance(2 * duration_ms * cycles + retry_delay_ms)
    bounce.disable()

    timeline = [
        (ease[4], app_id, ease[0])
        for app_id, actor in icons.items()
        for ease in actor.eases
    ]
    return sorted(timeline, key=lambda entry: entry[0])
