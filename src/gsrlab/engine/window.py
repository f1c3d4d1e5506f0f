"""Window selection over an ingested series.

A requested window is clamped into the series' date range and each endpoint
is moved forward to the next date that actually has a quote (weekends and
market holidays have none).
"""

from __future__ import annotations

from gsrlab.dates import add_days, from_key, to_key
from gsrlab.types import Series, Window

# Forward probing gives up after roughly ten years of calendar days.
MAX_SNAP_DAYS = 3660


def snap_forward(series: Series, key: str) -> str:
    """Return ``key`` if present, else the next present key after it.

    If nothing turns up within :data:`MAX_SNAP_DAYS` days (or the key is not
    a valid date) the key is returned unchanged.
    """
    if not key or not series or series.has_key(key):
        return key

    current = from_key(key)
    if current is None:
        return key

    for _ in range(MAX_SNAP_DAYS):
        current = add_days(current, 1)
        candidate = to_key(current)
        if series.has_key(candidate):
            return candidate
    return key


def clamp_window(series: Series, start_key: str, end_key: str) -> Window:
    """Adjust a requested window to the series.

    Both keys are clamped into ``[min_key, max_key]``, the end is raised to
    the start if they cross, and each is snapped forward to a present date.
    ISO keys compare in date order, so plain string comparison is used.

    :param series: Full ingested series.
    :param start_key: Requested start as "YYYY-MM-DD" ("" if unset).
    :param end_key: Requested end as "YYYY-MM-DD" ("" if unset).
    :returns: Adjusted window; unset keys or an empty series pass through.
    """
    if not series or not start_key or not end_key:
        return Window(start_key=start_key, end_key=end_key)

    low, high = series.min_key, series.max_key
    start = min(max(start_key, low), high)
    end = min(max(end_key, low), high)
    if start > end:
        end = start

    return Window(start_key=snap_forward(series, start), end_key=snap_forward(series, end))


def select_window(series: Series, window: Window) -> Series:
    """Records of ``series`` falling inside ``window`` (both ends inclusive)."""
    start = from_key(window.start_key)
    end = from_key(window.end_key)
    if not series or start is None or end is None:
        return Series()
    return series.between(start, end)


__all__ = ["MAX_SNAP_DAYS", "snap_forward", "clamp_window", "select_window"]
