from datetime import datetime, timedelta

import pytest

from services.duration import (
    ZERO_DURATION,
    Duration,
    DurationStrategy,
    estimate,
    estimate_from_access_logs,
    estimate_from_samples,
    latest_access,
)
from services.snapshot import load_instructors


def _instructor(node):
    return load_instructors({"i1": node})[0]


def test_duration_from_timedelta():
    assert Duration.from_timedelta(timedelta(hours=1, minutes=30)) == Duration(1, 30, 1.5)
    assert Duration.from_timedelta(timedelta(minutes=-5)) == ZERO_DURATION


def test_access_to_last_reading(make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassHistory": {"h": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_143000")), "2024_03_10_120000")},
    })

    duration = estimate_from_samples(instructor, datetime(2024, 3, 10, 13, 0, 0), "705")

    assert duration.hours == 1
    assert duration.minutes == 30
    assert duration.total_hours == pytest.approx(1.5)


def test_most_recent_history_is_checked_first(make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassHistory": {
            "old": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_160000")), "2024_03_10_090000"),
            "new": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_140000")), "2024_03_10_120000"),
        },
    })

    duration = estimate_from_samples(instructor, datetime(2024, 3, 10, 13, 0, 0), "705")
    assert duration.total_hours == pytest.approx(1.0)


def test_readings_before_access_never_give_negative_duration(make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassHistory": {"h": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_120000")), "2024_03_10_120000")},
        "ClassStatus": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_130000")), "2024_03_10_130000", "Class In Session"),
    })

    assert estimate_from_samples(instructor, datetime(2024, 3, 10, 13, 0, 0), "705") == ZERO_DURATION


def test_live_reading_is_the_fallback(make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassStatus": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_134500")), "2024_03_10_130000", "Class In Session"),
    })

    duration = estimate_from_samples(instructor, datetime(2024, 3, 10, 13, 0, 0), "705")
    assert (duration.hours, duration.minutes) == (0, 45)


def test_no_access_timestamp_is_zero(campus_snapshot):
    reyes = load_instructors(campus_snapshot)[1]
    assert estimate_from_samples(reyes, None, "705") == ZERO_DURATION


def test_latest_access_ignores_denied_and_unparseable(make_access):
    instructor = _instructor({
        "AccessLogs": {
            "a": make_access("Access", "granted", "2024_03_10_080000"),
            "b": make_access("Access", "granted", "2024_03_10_130000"),
            "c": make_access("Access", "denied", "2024_03_10_150000"),
            "d": make_access("Access", "granted", "garbage"),
        },
    })

    assert latest_access(instructor) == datetime(2024, 3, 10, 13, 0, 0)
    assert latest_access(_instructor({})) is None


def test_access_log_pair_wins_over_readings(make_access, make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassHistory": {"h": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_143000")), "2024_03_10_120000")},
        "AccessLogs": {
            "in": make_access("Access", "granted", "2024_03_10_130000"),
            "out": make_access("EndSession", "completed", "2024_03_10_150000"),
        },
    })
    access_ts = latest_access(instructor)

    assert estimate_from_access_logs(instructor, access_ts, "705").total_hours == pytest.approx(2.0)
    assert estimate(instructor, access_ts, "705", DurationStrategy.SAMPLES).total_hours == pytest.approx(1.5)


def test_stale_end_session_falls_back_to_readings(make_access, make_pzem, make_schedule, make_session):
    instructor = _instructor({
        "ClassHistory": {"h": make_session(make_schedule(pzem=make_pzem(timestamp="2024_03_10_143000")), "2024_03_10_120000")},
        "AccessLogs": {
            "prev_out": make_access("EndSession", "completed", "2024_03_09_170000"),
            "in": make_access("Access", "granted", "2024_03_10_130000"),
        },
    })

    duration = estimate(instructor, latest_access(instructor), "705", "access_logs")
    assert duration.total_hours == pytest.approx(1.5)


def test_default_hours_when_nothing_measurable(make_access):
    instructor = _instructor({"AccessLogs": {"in": make_access("Access", "granted", "2024_03_10_130000")}})

    duration = estimate_from_access_logs(instructor, latest_access(instructor), "705", default_hours=1.0)
    assert duration == Duration(1, 0, 1.0)


def test_unknown_strategy_is_rejected(campus_snapshot):
    reyes = load_instructors(campus_snapshot)[1]
    with pytest.raises(ValueError):
        estimate(reyes, None, "705", "guess")
