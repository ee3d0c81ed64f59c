"""
Shell host model — the pieces of a desktop shell the input filters plug into.

Everything runs on one cooperative MainLoop with a virtual monotonic clock
(milliseconds). The loop only moves when advance()/advance_to() is called,
so event traces replay deterministically.
"""

import enum
import heapq
import itertools
import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

EVENT_PROPAGATE = False
EVENT_STOP = True

SOURCE_REMOVE = False
SOURCE_CONTINUE = True


class EventType(enum.Enum):
    KEY_PRESS = "key-press"
    KEY_RELEASE = "key-release"
    MOTION = "motion"
    BUTTON_PRESS = "button-press"
    BUTTON_RELEASE = "button-release"
    SCROLL = "scroll"


@dataclass(frozen=True)
class Event:
    type: EventType
    dx: float = 0.0
    dy: float = 0.0


class MainLoop:
    """Single-threaded timer loop over a virtual millisecond clock."""

    def __init__(self, start_ms=0.0):
        self.time_ms = float(start_ms)
        self._queue = []
        self._sources = {}
        self._ids = itertools.count(1)
        self._seq = itertools.count()

    def now_ms(self):
        return self.time_ms

    def timeout_add(self, interval_ms, callback):
        """Call `callback` every interval_ms until it returns SOURCE_REMOVE."""
        source_id = next(self._ids)
        self._sources[source_id] = (interval_ms, callback)
        self._schedule(source_id, self.time_ms + interval_ms)
        return source_id

    def timeout_add_once(self, delay_ms, callback):
        """Call `callback` once after delay_ms."""
        def once():
            callback()
            return SOURCE_REMOVE
        return self.timeout_add(delay_ms, once)

    def source_remove(self, source_id):
        return self._sources.pop(source_id, None) is not None

    def pending(self):
        return len(self._sources)

    def _schedule(self, source_id, due_ms):
        heapq.heappush(self._queue, (due_ms, next(self._seq), source_id))

    def advance_to(self, target_ms):
        """Move the clock forward, dispatching every source that falls due."""
        while self._queue and self._queue[0][0] <= target_ms:
            due_ms, _, source_id = heapq.heappop(self._queue)
            entry = self._sources.get(source_id)
            if entry is None:
                continue
            self.time_ms = max(self.time_ms, due_ms)
            interval_ms, callback = entry
            if callback() and source_id in self._sources:
                self._schedule(source_id, self.time_ms + interval_ms)
            else:
                self._sources.pop(source_id, None)
        self.time_ms = max(self.time_ms, target_ms)

    def advance(self, delta_ms):
        self.advance_to(self.time_ms + delta_ms)


class Signal:
    """Ordered handler list; emission stops at the first handler returning True."""

    def __init__(self):
        self._handlers = {}
        self._ids = itertools.count(1)

    def connect(self, handler):
        handler_id = next(self._ids)
        self._handlers[handler_id] = handler
        return handler_id

    def disconnect(self, handler_id):
        if self._handlers.pop(handler_id, None) is None:
            raise KeyError(f"No handler with id {handler_id}")

    def handler_count(self):
        return len(self._handlers)

    def emit(self, *args):
        for handler in list(self._handlers.values()):
            if handler(*args):
                return True
        return False


class Stage:
    """Global input event stream."""

    def __init__(self):
        self._event = Signal()
        self.delivered = []

    def connect(self, handler):
        return self._event.connect(handler)

    def disconnect(self, handler_id):
        self._event.disconnect(handler_id)

    def dispatch(self, event):
        """Run the listeners; returns True when the event reached the default handler."""
        stopped = self._event.emit(self, event)
        if not stopped:
            self.delivered.append(event)
        return not stopped


class AppState(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class App:
    def __init__(self, app_id):
        self.id = app_id
        self.state = AppState.STOPPED

    def __repr__(self):
        return f"App({self.id!r}, {self.state.value})"


class AppSystem:
    """Registry of applications emitting app-state-changed notifications."""

    def __init__(self):
        self._state_changed = Signal()
        self._apps = {}

    def lookup_app(self, app_id):
        if app_id not in self._apps:
            self._apps[app_id] = App(app_id)
        return self._apps[app_id]

    def connect(self, handler):
        return self._state_changed.connect(handler)

    def disconnect(self, handler_id):
        self._state_changed.disconnect(handler_id)

    def set_state(self, app_id, state):
        app = self.lookup_app(app_id)
        app.state = state
        self._state_changed.emit(self, app)
        return app


class AnimationMode(enum.Enum):
    LINEAR = "linear"
    EASE_OUT_BACK = "ease-out-back"


def ease_out_back(t, overshoot=1.70158):
    """Overshoot past 1.0, then settle back onto it."""
    t -= 1.0
    return t * t * ((overshoot + 1) * t + overshoot) + 1.0


EASINGS = {
    AnimationMode.LINEAR: lambda t: t,
    AnimationMode.EASE_OUT_BACK: ease_out_back,
}


class Actor:
    """Scene graph element with an animatable scale."""

    def __init__(self, loop, name=""):
        self.loop = loop
        self.name = name
        self.scale_x = 1.0
        self.scale_y = 1.0
        self.eases = []
        self._transition = None
        self._source = None

    def __repr__(self):
        return f"Actor({self.name!r})"

    def set_scale(self, scale_x, scale_y):
        self.scale_x = scale_x
        self.scale_y = scale_y

    def get_scale(self):
        """Current scale, interpolated if a transition is running."""
        if self._transition is None:
            return self.scale_x, self.scale_y
        start_ms, duration, start, target, mode = self._transition
        t = min(1.0, (self.loop.now_ms() - start_ms) / duration) if duration else 1.0
        k = EASINGS[mode](t)
        return (
            start[0] + (target[0] - start[0]) * k,
            start[1] + (target[1] - start[1]) * k,
        )

    def is_animating(self):
        return self._transition is not None

    def ease(self, scale_x, scale_y, duration, mode=AnimationMode.LINEAR, on_complete=None):
        """Animate to the target scale; on_complete runs on the loop when done."""
        self.remove_all_transitions()
        start = (self.scale_x, self.scale_y)
        self._transition = (self.loop.now_ms(), duration, start, (scale_x, scale_y), mode)
        self.eases.append((scale_x, scale_y, duration, mode, self.loop.now_ms()))

        def finish():
            self._transition = None
            self._source = None
            self.set_scale(scale_x, scale_y)
            if on_complete:
                on_complete()

        self._source = self.loop.timeout_add_once(duration, finish)

    def remove_all_transitions(self):
        if self._transition is not None:
            self.loop.source_remove(self._source)
            self._transition = None
            self._source = None


class Dock:
    """A dock holding one icon actor per application."""

    def __init__(self, name="dash"):
        self.name = name
        self._icons = {}

    def add_icon(self, app_id, actor):
        self._icons[app_id] = actor

    def remove_icon(self, app_id):
        self._icons.pop(app_id, None)

    def locate_icon(self, app_id):
        return self._icons.get(app_id)
