from alerts.tracker import ElapsedTimeTracker


def test_never_started_is_zero():
    tracker = ElapsedTimeTracker(3600)
    assert tracker.elapsed(500.0) == 0.0
    assert not tracker.started


def test_elapsed_counts_from_start():
    tracker = ElapsedTimeTracker(3600)
    tracker.start(100.0)
    assert tracker.elapsed(100.0) == 0.0
    assert tracker.elapsed(190.5) == 90.5


def test_elapsed_saturates_at_total_and_never_negative():
    tracker = ElapsedTimeTracker(60)
    tracker.start(10.0)
    assert tracker.elapsed(5.0) == 0.0
    assert tracker.elapsed(10_000.0) == 60.0


def test_pause_freezes_and_resume_continues():
    tracker = ElapsedTimeTracker(3600)
    tracker.start(0.0)
    assert tracker.pause(100.0)
    assert tracker.paused
    assert tracker.elapsed(100.0) == 100.0
    assert tracker.elapsed(400.0) == 100.0
    assert tracker.resume(400.0)
    assert tracker.elapsed(400.0) == 100.0
    assert tracker.elapsed(450.0) == 150.0


def test_pause_is_noop_unless_running():
    tracker = ElapsedTimeTracker(3600)
    assert not tracker.pause(5.0)
    tracker.start(0.0)
    tracker.pause(10.0)
    assert not tracker.pause(20.0)
    assert tracker.pause_ts == 10.0


def test_resume_is_noop_unless_paused():
    tracker = ElapsedTimeTracker(3600)
    assert not tracker.resume(5.0)
    tracker.start(0.0)
    assert not tracker.resume(5.0)
    assert tracker.paused_total == 0.0


def test_multiple_pauses_accumulate():
    tracker = ElapsedTimeTracker(3600)
    tracker.start(0.0)
    tracker.pause(10.0)
    tracker.resume(20.0)
    tracker.pause(30.0)
    tracker.resume(45.0)
    assert tracker.paused_total == 25.0
    assert tracker.elapsed(50.0) == 25.0


def test_reset_clears_run():
    tracker = ElapsedTimeTracker(3600)
    tracker.start(0.0)
    tracker.pause(10.0)
    tracker.reset()
    assert not tracker.running
    assert tracker.start_ts is None
    assert tracker.pause_ts is None
    assert tracker.paused_total == 0.0
    assert tracker.elapsed(99.0) == 0.0


def test_zero_length_run_is_zero():
    tracker = ElapsedTimeTracker(0)
    tracker.start(0.0)
    assert tracker.elapsed(30.0) == 0.0
