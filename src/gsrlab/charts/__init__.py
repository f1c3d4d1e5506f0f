"""Chart axis scaling."""

from gsrlab.charts.axis import (
    compute_nice_domain,
    layout_axes,
    nice_ticks,
    ratio_axis,
    usd_axis,
)

__all__ = [
    "compute_nice_domain",
    "layout_axes",
    "nice_ticks",
    "ratio_axis",
    "usd_axis",
]
