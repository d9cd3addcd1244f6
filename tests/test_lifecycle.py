import threading

from alerts.lifecycle import AlertLifecycle, SoundRepeater
from alerts.ports import NotificationPermission
from alerts.scheduler import AlertEvent, AlertKind
from alerts.stages import SoundKind, Stage

from conftest import FakeDisplay, FakeHaptics, FakeNotifier

HOPS = Stage("st_1", "Hops", 30, SoundKind.BELL)


def test_pre_alert_is_single_shot(lifecycle, audio, haptics, notifier, display, repeater):
    lifecycle.handle(AlertEvent(AlertKind.PRE, HOPS, 5.0))
    alert = lifecycle.active_alert
    assert alert.kind == AlertKind.PRE
    assert alert.stage == HOPS
    assert alert.fired_at == 5.0
    assert audio.played == [("chirp", 900, 0.8)]
    assert haptics.patterns == [[120]]
    assert display.flashes == 1
    assert notifier.sent == [("Next up: Hops", "In 60s")]
    assert repeater.starts == 0


def test_main_alert_starts_repeating_sound(lifecycle, audio, haptics, notifier, display, repeater):
    lifecycle.handle(AlertEvent(AlertKind.MAIN, HOPS, 9.0))
    assert lifecycle.active_alert.kind == AlertKind.MAIN
    assert repeater.starts == 1
    assert repeater.interval_s == 1.2
    assert lifecycle.repeating
    assert audio.played == [("bell", 900, 0.8)]
    repeater.fire()
    repeater.fire()
    assert len(audio.played) == 3
    assert haptics.patterns == [[200, 100, 200]]
    assert display.flashes == 1
    assert notifier.sent == [("Stage: Hops", "Reached 30:00")]


def test_main_alert_replaces_unacknowledged_pre_alert(lifecycle):
    lifecycle.handle(AlertEvent(AlertKind.PRE, HOPS, 1.0))
    flame = Stage("st_2", "Flame Out", 60)
    lifecycle.handle(AlertEvent(AlertKind.MAIN, flame, 2.0))
    assert lifecycle.active_alert.stage == flame
    assert lifecycle.active_alert.kind == AlertKind.MAIN


def test_new_main_alert_stops_previous_repeat(lifecycle, repeater):
    lifecycle.handle(AlertEvent(AlertKind.MAIN, HOPS, 1.0))
    lifecycle.handle(AlertEvent(AlertKind.MAIN, Stage("st_2", "Flame Out", 60), 2.0))
    assert repeater.starts == 2
    assert repeater.stops == 1
    assert repeater.active


def test_acknowledge_stops_repeat_and_clears_slot(lifecycle, repeater):
    lifecycle.handle(AlertEvent(AlertKind.MAIN, HOPS, 1.0))
    acked = lifecycle.acknowledge()
    assert acked.stage == HOPS
    assert lifecycle.active_alert is None
    assert not repeater.active
    assert lifecycle.acknowledge() is None


def test_acknowledge_clears_pre_alert(lifecycle):
    lifecycle.handle(AlertEvent(AlertKind.PRE, HOPS, 1.0))
    lifecycle.acknowledge()
    assert lifecycle.active_alert is None


def test_notifications_require_granted_permission(lifecycle, notifier):
    for permission in (NotificationPermission.DENIED, NotificationPermission.DEFAULT):
        lifecycle.permission = permission
        lifecycle.handle(AlertEvent(AlertKind.PRE, HOPS, 1.0))
    assert notifier.sent == []


def test_flash_and_vibration_follow_settings(lifecycle, haptics, display):
    lifecycle.flash_screen = False
    lifecycle.vibrate = False
    lifecycle.handle(AlertEvent(AlertKind.MAIN, HOPS, 1.0))
    assert display.flashes == 0
    assert haptics.patterns == []


class ExplodingAudio:
    def play(self, kind, duration_ms, volume):
        raise RuntimeError("no sound card")


def test_failing_collaborator_does_not_block_others():
    haptics, notifier, display = FakeHaptics(), FakeNotifier(), FakeDisplay()
    lifecycle = AlertLifecycle(
        audio=ExplodingAudio(),
        haptics=haptics,
        notifier=notifier,
        display=display,
        permission=NotificationPermission.GRANTED,
    )
    lifecycle.handle(AlertEvent(AlertKind.PRE, HOPS, 1.0))
    lifecycle.handle(AlertEvent(AlertKind.MAIN, HOPS, 2.0))
    try:
        assert lifecycle.active_alert.kind == AlertKind.MAIN
        assert len(haptics.patterns) == 2
        assert len(notifier.sent) == 2
        assert display.flashes == 2
    finally:
        lifecycle.clear()


def test_sound_repeater_repeats_until_stopped():
    calls = []
    enough = threading.Event()

    def action():
        calls.append(1)
        if len(calls) >= 3:
            enough.set()

    repeater = SoundRepeater()
    repeater.start(action, 0.01)
    assert len(calls) >= 1
    assert enough.wait(2.0)
    repeater.stop()
    assert not repeater.active
    stopped_at = len(calls)
    threading.Event().wait(0.1)
    assert len(calls) <= stopped_at + 1


def test_sound_repeater_restart_replaces_loop():
    first, second = [], []
    repeater = SoundRepeater()
    repeater.start(lambda: first.append(1), 60)
    repeater.start(lambda: second.append(1), 60)
    assert first == [1]
    assert second == [1]
    assert repeater.active
    repeater.stop()
