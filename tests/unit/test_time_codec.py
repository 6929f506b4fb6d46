from datetime import datetime

import pytest

from utils.time import format_display, format_timestamp, parse_timestamp


def test_parse_canonical_timestamp():
    assert parse_timestamp("2024_03_10_140500") == datetime(2024, 3, 10, 14, 5, 0)


def test_parse_keeps_24_hour_clock():
    assert parse_timestamp("2024_03_10_235959").hour == 23
    assert parse_timestamp("2024_03_10_000001").hour == 0


@pytest.mark.parametrize("raw", [
    "2024_03_10_140500",
    "2023_12_31_235959",
    "2024_02_29_000000",
])
def test_format_round_trips_to_same_instant(raw):
    parsed = parse_timestamp(raw)
    assert parse_timestamp(format_timestamp(parsed)) == parsed


def test_extra_segments_are_ignored():
    assert parse_timestamp("2024_03_10_140500_extra") == datetime(2024, 3, 10, 14, 5, 0)


@pytest.mark.parametrize("raw", [
    "2024_03_10",
    "2024-03-10 14:05:00",
    "2024_03_10_14ab00",
    "2024_03_10_14",
    "yyyy_03_10_140500",
    "2024_13_10_140500",
    "2024_03_10_250000",
    "",
    None,
    20240310140500,
])
def test_malformed_timestamps_return_none(raw):
    assert parse_timestamp(raw) is None


def test_display_format_is_twelve_hour():
    assert format_display(datetime(2024, 3, 10, 14, 5, 0)) == "2024-03-10 02:05:00 PM"
    assert format_display(datetime(2024, 3, 10, 0, 30, 0)) == "2024-03-10 12:30:00 AM"
