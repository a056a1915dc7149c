"""
Departure time tokens.

The timetable page mixes times with free text and icons inside the same
cell, so a time is only recognized when a whitespace-separated token is
exactly ``HH:MM``.
"""

from typing import Iterable
import re
import datetime

TIME_TOKEN_RE = re.compile(r"^\d{2}:\d{2}$")

# services running past midnight are listed at the end of the day
DAY_ROLLOVER_HOUR = 4


def parse_time_token(text: str) -> datetime.time | None:
    """
    Parse a single ``HH:MM`` token; anything else (including out of range
    values like ``25:10``) is None.
    """

    token = text.strip()
    if TIME_TOKEN_RE.match(token) is None:
        return None

    hour, minute = token.split(":")
    try:
        return datetime.time(int(hour), int(minute))
    except ValueError:
        return None


def format_time(time: datetime.time) -> str:
    return time.strftime("%H:%M")


def time_sort_key(time: datetime.time) -> tuple[int, int]:
    """
    Order times within a service day; early morning hours sort after 23:59.
    """

    hour = time.hour + 24 if time.hour < DAY_ROLLOVER_HOUR else time.hour
    return (hour, time.minute)


def tokens_from_text(text: str) -> list[str]:
    """
    Pull every valid time out of a chunk of free text, in order.
    """

    tokens = []
    for word in text.split():
        time = parse_time_token(word)
        if time is not None:
            tokens.append(format_time(time))

    return tokens


def dedupe_and_sort(tokens: Iterable[str]) -> list[str]:
    """
    Remove repeated times and sort by service day order.
    """

    times: set[datetime.time] = set()
    for token in tokens:
        time = parse_time_token(token)
        if time is not None:
            times.add(time)

    return [format_time(time) for time in sorted(times, key=time_sort_key)]
