"""Axis domains and ticks for the value and ratio charts.

One routine serves both axes: the USD axis scans whichever value series are
visible and never goes below zero, the ratio axis scans the ratio series with
no floor. Padding is added before rounding, more above than below, so lines
stay clear of the top edge.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from gsrlab.types import (
    AUTO,
    AxisLayout,
    AxisMode,
    AxisSpec,
    PriceRecord,
    SimulatedRecord,
    Visibility,
)

DEFAULT_TICK_COUNT = 7
DEFAULT_PAD_FRACTION = 0.06

# Share of the padding applied below the data.
LOWER_PAD_SHARE = 0.25

STEP_MULTIPLIERS = (1.0, 2.0, 2.5, 5.0, 10.0)

AUTO_AXIS = AxisSpec(domain=(AUTO, AUTO), ticks=None)


def nice_step(rough_step: float) -> float:
    """Step from {1, 2, 2.5, 5, 10} x 10^k closest to ``rough_step``."""
    pow10 = 10 ** math.floor(math.log10(rough_step))
    candidates = [m * pow10 for m in STEP_MULTIPLIERS]
    return min(candidates, key=lambda s: abs(s - rough_step))


def _clean(value: float, step: float) -> float:
    # Drop float noise from step multiples; 2.5 x 10^k needs one extra digit.
    digits = max(0, 1 - math.floor(math.log10(step)))
    return round(value, digits) + 0.0


def nice_ticks(low: float, high: float, target: int = DEFAULT_TICK_COUNT) -> AxisSpec:
    """Round ``[low, high]`` outward to a nice step and list the ticks."""
    if not (math.isfinite(low) and math.isfinite(high)):
        return AUTO_AXIS

    if low == high:
        return AxisSpec(domain=(low - 1, high + 1), ticks=(low - 1, low, high + 1))

    rough_step = (high - low) / max(2, target - 1)
    step = nice_step(rough_step)

    nice_min = math.floor(low / step) * step
    nice_max = math.ceil(high / step) * step
    count = round((nice_max - nice_min) / step)

    ticks = tuple(_clean(nice_min + i * step, step) for i in range(count + 1))
    return AxisSpec(domain=(_clean(nice_min, step), _clean(nice_max, step)), ticks=ticks)


def padded_range(
    low: float,
    high: float,
    pad_fraction: float = DEFAULT_PAD_FRACTION,
    clamp_min_to_zero: bool = False,
) -> tuple[float, float]:
    """Widen ``[low, high]``: a full pad above, a quarter pad below."""
    pad = (high - low) * pad_fraction
    padded_low = low - pad * LOWER_PAD_SHARE
    padded_high = high + pad
    if clamp_min_to_zero:
        padded_low = max(0.0, padded_low)
    return padded_low, padded_high


def compute_nice_domain(
    values: Iterable[float | None],
    target_tick_count: int = DEFAULT_TICK_COUNT,
    pad_fraction: float = DEFAULT_PAD_FRACTION,
    clamp_min_to_zero: bool = False,
) -> AxisSpec:
    """Nice axis domain and ticks covering ``values``.

    Missing and non-finite values are ignored. With nothing left the
    "auto" axis is returned; a flat series gets one unit either side.

    :param values: Values to cover.
    :param target_tick_count: Approximate number of ticks wanted.
    :param pad_fraction: Padding as a fraction of the data range.
    :param clamp_min_to_zero: Keep the padded lower bound at or above zero.
    """
    finite = [v for v in values if v is not None and math.isfinite(v)]
    if not finite:
        return AUTO_AXIS

    low, high = min(finite), max(finite)
    if low == high:
        return nice_ticks(low, high, target_tick_count)

    padded_low, padded_high = padded_range(low, high, pad_fraction, clamp_min_to_zero)
    return nice_ticks(padded_low, padded_high, target_tick_count)


def usd_values(records: Sequence[SimulatedRecord], show: Visibility) -> list[float]:
    values: list[float] = []
    for r in records:
        if show.gold:
            values.append(r.gold_value)
        if show.silver:
            values.append(r.silver_value)
        if show.strategy:
            values.append(r.strategy_value)
    return values


def usd_axis(records: Sequence[SimulatedRecord], show: Visibility) -> AxisSpec:
    """Axis for the visible USD value series, floored at zero."""
    return compute_nice_domain(usd_values(records, show), clamp_min_to_zero=True)


def ratio_axis(records: Sequence[PriceRecord]) -> AxisSpec:
    """Axis for the gold/silver ratio series."""
    return compute_nice_domain(r.gsr for r in records)


def axis_mode(show: Visibility) -> AxisMode:
    if not show.any_usd and not show.ratio:
        return AxisMode.NONE
    if show.ratio and not show.any_usd:
        return AxisMode.RATIO_BOTH
    if show.any_usd and not show.ratio:
        return AxisMode.USD_BOTH
    return AxisMode.MIXED


def layout_axes(records: Sequence[SimulatedRecord], show: Visibility) -> AxisLayout:
    """Assign the USD and ratio axes to the chart's left and right sides.

    With both kinds visible the ratio takes the left axis and USD the right;
    with only one kind visible it is mirrored on both sides.
    """
    mode = axis_mode(show)
    usd = usd_axis(records, show)
    ratio = ratio_axis(records)

    left_is_ratio = mode in (AxisMode.MIXED, AxisMode.RATIO_BOTH)
    right_is_ratio = mode is AxisMode.RATIO_BOTH

    def label(is_ratio: bool) -> str:
        if mode is AxisMode.NONE:
            return ""
        return "Ratio" if is_ratio else "Value (USD)"

    return AxisLayout(
        mode=mode,
        left=ratio if left_is_ratio else usd,
        right=ratio if right_is_ratio else usd,
        left_label=label(left_is_ratio),
        right_label=label(right_is_ratio),
        usd_axis="right" if mode in (AxisMode.USD_BOTH, AxisMode.MIXED) else "left",
        ratio_axis="left",
    )


__all__ = [
    "AUTO_AXIS",
    "nice_step",
    "nice_ticks",
    "padded_range",
    "compute_nice_domain",
    "usd_axis",
    "ratio_axis",
    "axis_mode",
    "layout_axes",
]
