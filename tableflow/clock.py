"""Clock-of-day parsing, formatting and circular window arithmetic."""

import re

from tableflow.models import ClockTime, TimeWindow

MINUTES_PER_DAY = 24 * 60

_CLOCK_24 = re.compile(r"^(\d{1,2}):(\d{2})$")
_CLOCK_12 = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp])\.?[Mm]\.?$")


def parse_clock(raw: ClockTime | None) -> int | None:
    """
    Parse a clock value into minutes since midnight.

    Accepts ints in [0, 1440], "HH:MM" (00:00-23:59), "H:MM AM/PM" and the
    end-of-day sentinel "24:00" (1440). Returns None for anything else.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw if 0 <= raw <= MINUTES_PER_DAY else None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    match = _CLOCK_24.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour == 24 and minute == 0:
            return MINUTES_PER_DAY
        if hour > 23 or minute > 59:
            return None
        return hour * 60 + minute

    match = _CLOCK_12.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if not 1 <= hour <= 12 or minute > 59:
            return None
        hour %= 12
        if match.group(3).lower() == "p":
            hour += 12
        return hour * 60 + minute

    return None


def require_clock(raw: ClockTime) -> int:
    """Parse a caller-supplied clock value, raising ValueError if malformed."""
    minute = parse_clock(raw)
    if minute is None:
        raise ValueError(f"Not a clock time: {raw!r}")
    return minute


def format_clock_24(minute: int) -> str:
    minute %= MINUTES_PER_DAY
    return f"{minute // 60:02d}:{minute % 60:02d}"


def format_clock_12(minute: int) -> str:
    minute %= MINUTES_PER_DAY
    hour, mins = divmod(minute, 60)
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{mins:02d} {suffix}"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def _to_minutes(value: ClockTime) -> int | None:
    # Plain ints are absolute offsets and may lie outside a single day
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return parse_clock(value)


def normalize_window(start: ClockTime, end: ClockTime, anchor: ClockTime) -> TimeWindow | None:
    """
    Place a (start, end) pair on the timeline relative to an anchor.

    An end earlier than its start wraps past midnight. The window is then
    moved by whole days to the earliest occurrence whose end is after the
    anchor, so "22:00"-"01:00" reads as tonight when anchored at 23:00 and
    as the night before when anchored at 00:30.

    Returns None when any value is unparseable or the window is empty.
    """
    s = _to_minutes(start)
    e = _to_minutes(end)
    a = _to_minutes(anchor)
    if s is None or e is None or a is None:
        return None
    if e < s:
        e += MINUTES_PER_DAY
    if e <= s:
        return None
    days = (a - e) // MINUTES_PER_DAY + 1
    return TimeWindow(s, e).shifted(days)


def align(window: TimeWindow, anchor: int) -> TimeWindow:
    """Re-normalize an already valid window against a new anchor."""
    days = (anchor - window.end) // MINUTES_PER_DAY + 1
    return window.shifted(days)


def minutes_until(target: int, origin: int) -> int:
    """Forward distance on the clock face from origin to target."""
    return (target - origin) % MINUTES_PER_DAY


def round_up(minute: int, step: int) -> int:
    return -(-minute // step) * step


def round_down(minute: int, step: int) -> int:
    return (minute // step) * step
