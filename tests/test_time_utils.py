from alerts.time_utils import format_hms, format_progress, format_stage_time


def test_format_hms():
    assert format_hms(0) == "0:00"
    assert format_hms(59) == "0:59"
    assert format_hms(1805) == "30:05"
    assert format_hms(3600) == "1:00:00"
    assert format_hms(3725.9) == "1:02:05"
    assert format_hms(-3) == "0:00"


def test_format_stage_time_and_progress():
    assert format_stage_time(45) == "45:00"
    assert format_progress(0.5, width=10) == "[#####-----]"
    assert format_progress(2.0, width=4) == "[####]"
