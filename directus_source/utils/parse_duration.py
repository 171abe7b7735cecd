import re

_UNITS: dict[str, float] = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
    "d": 86400.0,
    "day": 86400.0,
    "days": 86400.0,
    "w": 604800.0,
    "week": 604800.0,
    "weeks": 604800.0,
    "y": 31557600.0,
    "yr": 31557600.0,
    "yrs": 31557600.0,
    "year": 31557600.0,
    "years": 31557600.0,
}

_DURATION_RE = re.compile(r"^(?P<value>-?\d*\.?\d+)\s*(?P<unit>[a-z]+)?$", re.IGNORECASE)


def parse_duration(value: float | int | str) -> float:
    """Convert a refresh interval into seconds.

    Numbers are taken as seconds. Strings follow the usual short duration
    format ("500ms", "5s", "5m", "1h", "2 days"); a string without a unit is
    read as milliseconds. Negative durations raise ``ValueError``.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value).strip())
        if not match:
            raise ValueError(f"Invalid duration: {value!r}")

        unit = (match.group("unit") or "ms").lower()
        if unit not in _UNITS:
            raise ValueError(f"Invalid duration unit: {unit!r}")
        seconds = float(match.group("value")) * _UNITS[unit]

    if seconds < 0:
        raise ValueError(f"Negative duration: {value!r}")
    return seconds
