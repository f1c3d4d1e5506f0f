"""Threshold-switching strategy between gold and silver.

The strategy always holds exactly one metal. It moves its whole position
into silver when the gold/silver ratio rises through ``g2s_threshold`` and
back into gold when the ratio falls through ``s2g_threshold``, losing
``conversion_cost`` of the value on every switch.

A crossing needs the previous ratio strictly on the near side and the
current ratio on or past the threshold::

    up:   prev.gsr < g2s <= cur.gsr   (only while holding gold)
    down: prev.gsr > s2g >= cur.gsr   (only while holding silver)

The simulation is a left fold over the window in date order, carrying
``(held metal, units, switch count)``. It keeps no state between runs:
every call replays from the window's first record.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from gsrlab.engine.valuation import units_bought
from gsrlab.types import (
    Metal,
    PriceRecord,
    SimulatedRecord,
    SimulationResult,
    SwitchSettings,
    ValuedRecord,
)


class _Holding(NamedTuple):
    metal: Metal
    units: float
    switches: int


def crossed_up(prev_ratio: float, ratio: float, threshold: float) -> bool:
    """Ratio rose through ``threshold``; non-finite thresholds never fire."""
    return math.isfinite(threshold) and prev_ratio < threshold <= ratio


def crossed_down(prev_ratio: float, ratio: float, threshold: float) -> bool:
    """Ratio fell through ``threshold``; non-finite thresholds never fire."""
    return math.isfinite(threshold) and prev_ratio > threshold >= ratio


class ThresholdSwitchStrategy:
    """Gold/silver switching strategy.

    Example usage::

        strategy = ThresholdSwitchStrategy(
            SwitchSettings(g2s_threshold=85, s2g_threshold=65, start_metal=Metal.GOLD)
        )
        result = strategy.run(valued_records, amount=1000)
        print(result.switches, result.ends_in.label)

    :param settings: Thresholds, starting metal and conversion cost.
    """

    def __init__(self, settings: SwitchSettings | None = None) -> None:
        self.settings = settings or SwitchSettings()

    def decide(self, prev: PriceRecord, record: PriceRecord, held: Metal) -> Metal | None:
        """Metal to switch into at ``record``, or None to keep holding.

        At most one switch can happen per record.
        """
        if held is Metal.GOLD:
            crossed = crossed_up(prev.gsr, record.gsr, self.settings.g2s_threshold)
        else:
            crossed = crossed_down(prev.gsr, record.gsr, self.settings.s2g_threshold)
        return held.other if crossed else None

    def _switch(self, holding: _Holding, record: PriceRecord, target: Metal) -> _Holding:
        usd = holding.units * record.price(holding.metal)
        price = record.price(target)
        units = usd / price * (1 - self.settings.conversion_cost) if price > 0 else 0.0
        return _Holding(target, units, holding.switches + 1)

    def _step(
        self,
        holding: _Holding,
        prev: PriceRecord | None,
        record: PriceRecord,
    ) -> _Holding:
        if prev is None:
            return holding
        target = self.decide(prev, record, holding.metal)
        if target is None:
            return holding
        return self._switch(holding, record, target)

    def run(self, records: Sequence[ValuedRecord], amount: float) -> SimulationResult:
        """Simulate the strategy over a valued window.

        :param records: Valued records in ascending date order.
        :param amount: Starting amount in USD, all placed in the start metal
            at the first record's price.
        :returns: Per-record strategy values plus the final state.
        """
        if not records:
            return SimulationResult()

        start_metal = self.settings.start_metal
        first = records[0]
        holding = _Holding(start_metal, units_bought(amount, first.price(start_metal)), 0)

        out: list[SimulatedRecord] = []
        prev: PriceRecord | None = None
        for record in records:
            holding = self._step(holding, prev, record)
            out.append(
                SimulatedRecord(
                    date=record.date,
                    gold=record.gold,
                    silver=record.silver,
                    gold_value=record.gold_value,
                    silver_value=record.silver_value,
                    strategy_value=holding.units * record.price(holding.metal),
                    held_metal=holding.metal,
                    switch_count=holding.switches,
                )
            )
            prev = record

        return SimulationResult(
            records=tuple(out),
            ends_in=holding.metal,
            switches=holding.switches,
        )


def simulate(
    records: Sequence[ValuedRecord],
    amount: float,
    settings: SwitchSettings | None = None,
) -> SimulationResult:
    """Run :class:`ThresholdSwitchStrategy` once with ``settings``."""
    return ThresholdSwitchStrategy(settings).run(records, amount)


__all__ = [
    "ThresholdSwitchStrategy",
    "crossed_up",
    "crossed_down",
    "simulate",
]
