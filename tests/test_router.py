from alerts.ports import NotificationPermission
from alerts.router import CommandRouter
from alerts.scheduler import AlertKind


class FakeWakeLock:
    def __init__(self):
        self.active = False

    def acquire(self):
        self.active = True

    def release(self):
        self.active = False


def _router(engine, saved=None, **kwargs):
    return CommandRouter(engine, save_fn=(saved.append if saved is not None else None), **kwargs)


def test_start_pause_resume_reset(make_engine):
    engine = make_engine([("Hops", 30)])
    router = _router(engine)
    assert router.handle_text("pause", now=0.0).response_text == "Timer is not running."
    router.handle_text("start", now=0.0)
    assert engine.running
    assert router.handle_text("pause", now=10.0).response_text == "Paused."
    assert router.handle_text("resume", now=20.0).response_text == "Resumed."
    router.handle_text("reset")
    assert not engine.started


def test_ack_reports_stage(make_engine):
    engine = make_engine([("Hops", 1)], lead=0)
    router = _router(engine)
    assert router.handle_text("ack").response_text == "No active alert."
    engine.start(now=0.0)
    engine.tick(now=60.0)
    assert engine.active_alert.kind == AlertKind.MAIN
    assert router.handle_text("ack").response_text == "Acknowledged: Hops."
    assert engine.active_alert is None


def test_add_remove_edit_are_saved_and_applied(make_engine):
    engine = make_engine([("Hops", 30)])
    saved = []
    router = _router(engine, saved)

    router.handle_text("add 10 chirp First wort")
    assert [s.label for s in engine.catalog] == ["First wort", "Hops"]
    router.handle_text("edit 1 minute 40")
    assert [s.label for s in engine.catalog] == ["Hops", "First wort"]
    router.handle_text("remove 1")
    assert [s.label for s in engine.catalog] == ["First wort"]
    assert len(saved) == 3
    assert saved[-1] == engine.settings
    assert router.handle_text("remove 9").response_text == "No such stage."


def test_value_settings_are_normalized(make_engine):
    engine = make_engine([("Hops", 30)])
    router = _router(engine)
    router.handle_text("volume 150")
    assert engine.settings.volume == 1.0
    router.handle_text("total 90")
    assert engine.settings.total_minutes == 90
    assert engine.lifecycle.volume == 1.0
    router.handle_text("lead 0")
    assert engine.settings.pre_alert_seconds == 0
    router.handle_text("flash off")
    assert engine.lifecycle.flash_screen is False


def test_save_failure_is_reported(make_engine):
    engine = make_engine([("Hops", 30)])

    def failing_save(settings):
        raise OSError("read-only")

    router = CommandRouter(engine, save_fn=failing_save)
    result = router.handle_text("total 45")
    assert result.response_text.endswith("(not saved)")
    assert engine.settings.total_minutes == 45


def test_status_and_stages_text(make_engine):
    engine = make_engine([("Hops", 30), ("Flame Out", 60)], lead=0)
    router = _router(engine)
    engine.start(now=0.0)
    engine.tick(now=1800.0)
    status = router.handle_text("status", now=1800.0).response_text
    assert "elapsed 30:00" in status
    assert "Next: Flame Out at 60:00" in status
    assert "Active alert: main - Hops" in status
    stages = router.stages_text()
    assert "1) 30:00 Hops [beep] fired=main" in stages
    assert "2) 60:00 Flame Out [beep] fired=-" in stages


def test_notify_and_wake(make_engine):
    engine = make_engine([("Hops", 30)])
    wake = FakeWakeLock()
    router = _router(engine, permission_fn=lambda: NotificationPermission.DENIED, wake_lock=wake)
    assert router.handle_text("notify").response_text == "Notify: denied"
    assert engine.permission == NotificationPermission.DENIED
    assert router.handle_text("wake").response_text == "Keep Awake: ON"
    assert router.handle_text("wake").response_text == "Keep Awake: OFF"
    assert _router(engine).handle_text("wake").response_text == "Keep awake is not available."


def test_quit_and_unknown(make_engine):
    router = _router(make_engine([]))
    assert router.handle_text("quit").quit
    assert router.handle_text("lead soon").response_text == "lead needs a number"
    assert router.handle_text("dance") is None
