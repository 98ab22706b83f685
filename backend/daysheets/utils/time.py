"""12-hour clock helpers for itinerary times such as ``10:15A`` or ``12P``."""

import re
from typing import Optional, Union

_CLOCK_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?([AP])$", re.IGNORECASE)

MINUTES_PER_DAY = 24 * 60


def parse_local_clock(raw: Optional[str]) -> Optional[int]:
    """Return minutes since midnight, or None when ``raw`` is not a valid clock."""
    if not raw:
        return None
    m = _CLOCK_RE.match(raw.strip())
    if not m:
        return None
    hour = int(m.group(1))
    minute = int(m.group(2) or "00")
    if hour < 1 or hour > 12 or minute > 59:
        return None
    meridiem = m.group(3).upper()
    if meridiem == "P" and hour != 12:
        hour += 12
    if meridiem == "A" and hour == 12:
        hour = 0
    return hour * 60 + minute


def format_clock(value: Union[str, int, None]) -> str:
    """Render a raw clock string or a minute count as ``H:MM AM``.

    Unparseable strings are returned unchanged.
    """
    if isinstance(value, int):
        minutes: Optional[int] = value % MINUTES_PER_DAY
    else:
        minutes = parse_local_clock(value)
        if minutes is None:
            return value or ""
    h24, mm = divmod(minutes, 60)
    suffix = "PM" if h24 >= 12 else "AM"
    h12 = 12 if h24 % 12 == 0 else h24 % 12
    return f"{h12}:{mm:02d} {suffix}"


def compute_duration_min(dep_raw: Optional[str], arr_raw: Optional[str], day_offset: int = 0) -> Optional[int]:
    dep = parse_local_clock(dep_raw)
    arr = parse_local_clock(arr_raw)
    if dep is None or arr is None:
        return None
    delta = arr - dep + day_offset * MINUTES_PER_DAY
    if delta < 0:
        # arrival printed without its +1 marker
        delta += MINUTES_PER_DAY
    return delta if delta >= 0 else None


def format_duration(minutes: Optional[int]) -> str:
    if minutes is None:
        return "—"
    hours, mm = divmod(minutes, 60)
    return f"{hours}h{mm:02d}"
