"""Comparison engine for the three gold/silver strategies.

This module wires the pipeline together: window selection, buy-and-hold
valuation, the switching simulation, summary statistics and chart axes.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from gsrlab.charts.axis import layout_axes
from gsrlab.engine.stats import summarize
from gsrlab.engine.switching import ThresholdSwitchStrategy
from gsrlab.engine.valuation import value_series
from gsrlab.engine.window import clamp_window, select_window
from gsrlab.types import (
    AxisLayout,
    Series,
    SimulatedRecord,
    SummaryStats,
    SwitchSettings,
    Visibility,
    Window,
)

log = logging.getLogger(__name__)


class ComparisonResult(BaseModel):
    """Results from a comparison run.

    :param window: The adjusted window actually used.
    :param records: Valued and simulated records, one per date in the window.
    :param stats: Summary statistics.
    :param axes: Chart axis layout for the current visibility toggles.
    """

    window: Window
    records: list[SimulatedRecord] = Field(default_factory=list)
    stats: SummaryStats
    axes: AxisLayout


class Comparison:
    """Compares buy-and-hold gold, buy-and-hold silver and threshold switching.

    Every :meth:`run` recomputes the whole pipeline from the series; nothing
    is carried over from earlier runs.

    Example usage::

        from gsrlab.data import FileTextSource, ingest
        from gsrlab.engine import Comparison

        result = ingest(FileTextSource("data"))
        comparison = Comparison(result.series, amount=1000)
        outcome = comparison.run("2010-01-01", "2020-12-31")

        print(f"Strategy return: {outcome.stats.strategy_return_pct:+.2f}%")
        print(f"Switches: {outcome.stats.switches}, ends in {outcome.stats.ends_in}")

    :param series: Full ingested series.
    :param amount: Starting amount in whole USD.
    :param settings: Switching strategy parameters.
    :param show: Chart visibility toggles (affect axes only).
    """

    def __init__(
        self,
        series: Series,
        amount: int = 1000,
        settings: SwitchSettings | None = None,
        show: Visibility | None = None,
    ) -> None:
        self.series = series
        self.amount = amount
        self.settings = settings or SwitchSettings()
        self.show = show or Visibility()
        self.strategy = ThresholdSwitchStrategy(self.settings)

    def default_window(self) -> Window:
        return Window(start_key=self.series.min_key, end_key=self.series.max_key)

    def run(self, start_key: str | None = None, end_key: str | None = None) -> ComparisonResult:
        """Run the comparison over a requested window.

        :param start_key: Requested start "YYYY-MM-DD" (None = first date).
        :param end_key: Requested end "YYYY-MM-DD" (None = last date).
        :returns: ComparisonResult with per-record data, stats and axes.
        """
        defaults = self.default_window()
        window = clamp_window(
            self.series,
            start_key or defaults.start_key,
            end_key or defaults.end_key,
        )
        windowed = select_window(self.series, window)
        valued = value_series(windowed.records, self.amount)
        simulation = self.strategy.run(valued, self.amount)

        log.debug(
            "Window %s..%s: %d records, %d switches",
            window.start_key,
            window.end_key,
            len(simulation.records),
            simulation.switches,
        )

        return ComparisonResult(
            window=window,
            records=list(simulation.records),
            stats=summarize(simulation.records, self.amount, window, self.series),
            axes=layout_axes(simulation.records, self.show),
        )


__all__ = ["Comparison", "ComparisonResult"]
