import datetime

from mykbus.times import (
    dedupe_and_sort,
    format_time,
    parse_time_token,
    time_sort_key,
    tokens_from_text,
)


def test_parse_time_token_accepts_strict_hh_mm():
    assert parse_time_token("09:00") == datetime.time(9, 0)
    assert parse_time_token("  23:59 ") == datetime.time(23, 59)
    assert parse_time_token("00:05") == datetime.time(0, 5)


def test_parse_time_token_rejects_everything_else():
    for text in ["9:00", "09:5", "0900", "09.00", "09:00am", "", "Daily", "25:10", "12:60"]:
        assert parse_time_token(text) is None, text


def test_tokens_from_text_drops_partial_times():
    assert tokens_from_text("09:00 and 09:5") == ["09:00"]
    assert tokens_from_text("\n 07:30\n08:45 (except Sunday)  ") == ["07:30", "08:45"]
    assert tokens_from_text("No service") == []


def test_sort_treats_early_hours_as_after_midnight():
    assert dedupe_and_sort(["23:00", "02:30", "09:00", "09:00"]) == [
        "09:00",
        "23:00",
        "02:30",
    ]


def test_rollover_boundary_is_four_am():
    assert dedupe_and_sort(["03:59", "04:00", "23:59", "00:00"]) == [
        "04:00",
        "23:59",
        "00:00",
        "03:59",
    ]
    assert time_sort_key(datetime.time(1, 15)) == (25, 15)
    assert time_sort_key(datetime.time(4, 0)) == (4, 0)


def test_format_time_pads():
    assert format_time(datetime.time(7, 5)) == "07:05"
