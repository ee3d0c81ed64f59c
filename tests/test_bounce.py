"""Tests for the launch bounce."""

import pytest

from theming.bounce import LaunchBounce, replay
from theming.config import default_manifest
from theming.shell import Actor, AnimationMode, AppState, AppSystem, Dock, MainLoop

APP = "org.gnome.Nautilus.desktop"


@pytest.fixture
def host():
    loop = MainLoop()
    apps = AppSystem()
    extension_dock = Dock("dash-to-dock")
    dash = Dock("overview-dash")
    bounce = LaunchBounce(apps, loop, [extension_dock, dash])
    bounce.enable()
    return loop, apps, extension_dock, dash, bounce


def test_starting_app_bounces_its_icon(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop, "nautilus")
    dock.add_icon(APP, icon)

    apps.set_state(APP, AppState.STARTING)
    assert icon in bounce.bouncing

    loop.advance(10_000)
    assert icon not in bounce.bouncing
    # two cycles of up + down
    assert [e[:2] for e in icon.eases] == [(1.24, 1.24), (1.0, 1.0)] * 2
    assert all(e[2] == 170 and e[3] is AnimationMode.EASE_OUT_BACK for e in icon.eases)
    assert icon.get_scale() == (1.0, 1.0)


def test_sequence_timing(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)
    apps.set_state(APP, AppState.STARTING)

    loop.advance_to(679)
    assert icon in bounce.bouncing
    loop.advance_to(680)
    assert icon not in bounce.bouncing


def test_scale_overshoots_then_settles(host):
    loop, apps, dock, _, _ = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)
    apps.set_state(APP, AppState.STARTING)

    loop.advance_to(85)
    assert icon.get_scale()[0] > 1.24
    loop.advance_to(170)
    assert icon.get_scale()[0] == pytest.approx(1.24)


def test_double_trigger_runs_one_sequence(host):
    loop, apps, dock, _, _ = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)

    apps.set_state(APP, AppState.STARTING)
    loop.advance(50)
    apps.set_state(APP, AppState.STARTING)
    loop.advance(10_000)

    assert len(icon.eases) == 4


def test_bounce_again_after_sequence_completes(host):
    loop, apps, dock, _, _ = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)

    apps.set_state(APP, AppState.STARTING)
    loop.advance(1000)
    apps.set_state(APP, AppState.STARTING)
    loop.advance(1000)

    assert len(icon.eases) == 8


def test_other_states_are_ignored(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)

    apps.set_state(APP, AppState.RUNNING)
    apps.set_state(APP, AppState.STOPPED)
    loop.advance(1000)

    assert icon.eases == []
    assert loop.pending() == 0


def test_extension_dock_searched_before_dash(host):
    loop, apps, dock, dash, _ = host
    dock_icon, dash_icon = Actor(loop), Actor(loop)
    dock.add_icon(APP, dock_icon)
    dash.add_icon(APP, dash_icon)

    apps.set_state(APP, AppState.STARTING)

    assert dock_icon.eases and not dash_icon.eases


def test_falls_back_to_dash(host):
    loop, apps, _, dash, _ = host
    icon = Actor(loop)
    dash.add_icon(APP, icon)

    apps.set_state(APP, AppState.STARTING)

    assert icon.eases


def test_late_icon_found_by_single_retry(host):
    loop, apps, dock, _, _ = host
    icon = Actor(loop)

    apps.set_state(APP, AppState.STARTING)
    loop.advance_to(60)
    dock.add_icon(APP, icon)
    loop.advance_to(119)
    assert icon.eases == []
    loop.advance_to(120)
    assert len(icon.eases) == 1


def test_icon_appearing_after_retry_is_never_bounced(host):
    loop, apps, dock, _, _ = host
    icon = Actor(loop)

    apps.set_state(APP, AppState.STARTING)
    loop.advance_to(200)
    dock.add_icon(APP, icon)
    loop.advance(10_000)

    assert icon.eases == []
    assert loop.pending() == 0


def test_retry_after_disable_is_a_no_op(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)

    apps.set_state(APP, AppState.STARTING)
    bounce.disable()
    dock.add_icon(APP, icon)
    loop.advance(1000)

    assert icon.eases == []


def test_disable_mid_bounce_settles_actor(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)
    apps.set_state(APP, AppState.STARTING)
    loop.advance_to(250)

    bounce.disable()
    loop.advance(10_000)

    assert icon.get_scale() == (1.0, 1.0)
    assert not icon.is_animating()
    assert len(icon.eases) == 2
    assert len(bounce.bouncing) == 0


def test_disable_disconnects(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)
    dock.add_icon(APP, icon)
    bounce.disable()

    apps.set_state(APP, AppState.STARTING)

    assert icon.eases == []


def test_registered_locator_is_consulted():
    class Locator:
        def __init__(self, actor):
            self.actor = actor
            self.asked = []

        def locate_icon(self, app_id):
            self.asked.append(app_id)
            return self.actor

    loop = MainLoop()
    apps = AppSystem()
    bounce = LaunchBounce(apps, loop)
    locator = Locator(Actor(loop))
    bounce.register_locator(locator)
    bounce.enable()

    apps.set_state(APP, AppState.STARTING)

    assert locator.asked == [APP]
    assert locator.actor.eases


def test_from_manifest_and_validation():
    manifest = default_manifest()
    manifest["bounce"].update(cycles=3, scale=1.5, duration_ms=100, retry_delay_ms=50)
    bounce = LaunchBounce.from_manifest(AppSystem(), MainLoop(), [], manifest)
    assert (bounce.cycles, bounce.scale, bounce.duration_ms, bounce.retry_delay_ms) == (3, 1.5, 100, 50)

    with pytest.raises(ValueError):
        LaunchBounce(AppSystem(), MainLoop(), cycles=0)


def test_icon_removed_before_retry_is_not_bounced(host):
    loop, apps, dock, _, bounce = host
    icon = Actor(loop)

    apps.set_state(APP, AppState.STARTING)
    dock.add_icon(APP, icon)
    dock.remove_icon(APP)
    loop.advance(500)

    assert icon.eases == []
    assert len(bounce.bouncing) == 0


def test_replay_timeline():
    timeline = replay([(APP, 0.0)])

    assert timeline == [
        (0.0, APP, 1.24), (170.0, APP, 1.0), (340.0, APP, 1.24), (510.0, APP, 1.0),
    ]


def test_replay_relaunch_while_bouncing_is_ignored():
    timeline = replay([(APP, 0.0), (APP, 100.0), ("firefox.desktop", 50.0)], cycles=1)

    assert [entry for entry in timeline if entry[1] == APP] == [(0.0, APP, 1.24), (170.0, APP, 1.0)]
    assert [entry[0] for entry in timeline if entry[1] == "firefox.desktop"] == [50.0, 220.0]
