"""Window selection, valuation, strategy simulation and statistics."""

from gsrlab.engine.comparison import Comparison, ComparisonResult
from gsrlab.engine.stats import summarize
from gsrlab.engine.switching import ThresholdSwitchStrategy, simulate
from gsrlab.engine.valuation import value_series
from gsrlab.engine.window import clamp_window, select_window, snap_forward

__all__ = [
    "Comparison",
    "ComparisonResult",
    "ThresholdSwitchStrategy",
    "clamp_window",
    "select_window",
    "simulate",
    "snap_forward",
    "summarize",
    "value_series",
]
