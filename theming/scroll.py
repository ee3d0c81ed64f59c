"""
Scroll throttle — weakens smooth scrolling by dropping scroll events.

Two gates compose: a scroll event is kept only if at least min_interval_ms
passed since the last kept one AND it is the Nth event to pass that gate.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from theming.shell import EVENT_PROPAGATE, EVENT_STOP, Event, EventType, MainLoop, Stage

log = logging.getLogger(__name__)


@dataclass
class ThrottleState:
    counter: int = 0
    # None until the first event is kept after activation
    last_kept_ms: Optional[float] = None


class ScrollThrottle:
    """Stage event filter keeping at most one in N scroll events."""

    def __init__(self, stage, clock, every_nth=3, min_interval_ms=18):
        if every_nth <= 0:
            raise ValueError(f"every_nth must be positive, got {every_nth}")
        if min_interval_ms < 0:
            raise ValueError(f"min_interval_ms must not be negative, got {min_interval_ms}")
        self.stage = stage
        self.clock = clock
        self.every_nth = every_nth
        self.min_interval_ms = min_interval_ms
        self.state = None
        self._handler_id = None

    @classmethod
    def from_manifest(cls, stage, clock, manifest: dict):
        scroll = manifest.get("scroll", {})
        return cls(
            stage, clock,
            every_nth=scroll.get("every_nth", 3),
            min_interval_ms=scroll.get("min_interval_ms", 18),
        )

    @property
    def enabled(self):
        return self._handler_id is not None

    def enable(self):
        if self.enabled:
            return
        self.state = ThrottleState()
        self._handler_id = self.stage.connect(self._on_event)
        log.debug("scroll_throttle_enabled n=%s min_ms=%s", self.every_nth, self.min_interval_ms)

    def disable(self):
        if self._handler_id is not None:
            self.stage.disconnect(self._handler_id)
            self._handler_id = None
        self.state = None

    def _on_event(self, _stage, event):
        return self.filter(event)

    def filter(self, event):
        """Return EVENT_STOP to drop the event, EVENT_PROPAGATE to keep it."""
        if event.type is not EventType.SCROLL or self.state is None:
            return EVENT_PROPAGATE

        now = self.clock()
        state = self.state
        if state.last_kept_ms is not None and now - state.last_kept_ms < self.min_interval_ms:
            return EVENT_STOP

        state.counter = (state.counter + 1) % self.every_nth
        if state.counter != 0:
            return EVENT_STOP

        state.last_kept_ms = now
        return EVENT_PROPAGATE


def replay(timestamps, every_nth=3, min_interval_ms=18):
    """
    Feed scroll events at the given millisecond timestamps through a fresh
    throttle and return a list of (timestamp, kept) pairs.
    """
    loop = MainLoop()
    stage = Stage()
    throttle = ScrollThrottle(stage, loop.now_ms, every_nth, min_interval_ms)
    throttle.enable()

    decisions = []
    for ts in sorted(timestamps):
        loop.advance_to(ts)
        decisions.append((ts, stage.dispatch(Event(EventType.SCROLL))))

    throttle.disable()
    return decisions
