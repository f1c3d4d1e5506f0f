"""End-of-window summary statistics."""

from __future__ import annotations

from typing import Sequence

from gsrlab.dates import diff_years_months, format_duration, from_key
from gsrlab.types import Metal, Series, SimulatedRecord, SummaryStats, Window


def percent_return(end_value: float, amount: float) -> float:
    """Return over the window in percent; zero when nothing was invested."""
    if amount <= 0:
        return 0.0
    return (end_value / amount - 1) * 100


def win_rate(wins: int, total: int) -> float:
    return wins / total * 100 if total else 0.0


def summarize(
    records: Sequence[SimulatedRecord],
    amount: int,
    window: Window | None = None,
    series: Series | None = None,
) -> SummaryStats:
    """Reduce a simulated window to its summary.

    Win rates count every record, the first included, where the strategy is
    worth strictly more than the buy-and-hold position; ties are not wins.

    :param records: Simulated records in date order (may be empty).
    :param amount: Starting amount in USD.
    :param window: Adjusted window, used for duration and ratios.
    :param series: Full series, used to look up the start and end ratios.
    :returns: Summary; an empty window reports the starting amount unchanged.
    """
    start = from_key(window.start_key) if window else None
    end = from_key(window.end_key) if window else None
    years, months = diff_years_months(start, end)

    start_ratio = end_ratio = None
    if window is not None and series is not None:
        start_record = series.get(window.start_key)
        end_record = series.get(window.end_key)
        start_ratio = start_record.gsr if start_record else None
        end_ratio = end_record.gsr if end_record else None

    common = dict(
        amount=amount,
        years=years,
        months=months,
        duration_text=format_duration(start, end),
        start_ratio=start_ratio,
        end_ratio=end_ratio,
        record_count=len(records),
    )

    if not records:
        return SummaryStats(
            gold_value=amount,
            silver_value=amount,
            strategy_value=amount,
            ends_in=Metal.GOLD.label,
            **common,
        )

    last = records[-1]
    gold_pct = percent_return(last.gold_value, amount)
    silver_pct = percent_return(last.silver_value, amount)
    strategy_pct = percent_return(last.strategy_value, amount)

    wins_gold = sum(1 for r in records if r.strategy_value > r.gold_value)
    wins_silver = sum(1 for r in records if r.strategy_value > r.silver_value)

    return SummaryStats(
        gold_value=last.gold_value,
        silver_value=last.silver_value,
        strategy_value=last.strategy_value,
        gold_change=last.gold_value - amount,
        silver_change=last.silver_value - amount,
        strategy_change=last.strategy_value - amount,
        gold_return_pct=gold_pct,
        silver_return_pct=silver_pct,
        strategy_return_pct=strategy_pct,
        vs_gold_pct=strategy_pct - gold_pct,
        vs_silver_pct=strategy_pct - silver_pct,
        beats_gold_pct=win_rate(wins_gold, len(records)),
        beats_silver_pct=win_rate(wins_silver, len(records)),
        switches=last.switch_count,
        ends_in=last.held_metal.label,
        **common,
    )


__all__ = ["percent_return", "win_rate", "summarize"]
