"""Buy-and-hold valuation of gold and silver."""

from __future__ import annotations

from typing import Sequence

from gsrlab.types import PriceRecord, ValuedRecord


def units_bought(amount: float, price: float) -> float:
    """Ounces ``amount`` USD buys at ``price``; zero if either is non-positive."""
    if amount <= 0 or price <= 0:
        return 0.0
    return amount / price


def value_series(records: Sequence[PriceRecord], amount: float) -> tuple[ValuedRecord, ...]:
    """Mark both buy-and-hold positions to market on every record.

    Each position is bought once with the full ``amount`` at the first
    record's price and never rebalanced.

    :param records: Windowed records in date order.
    :param amount: Starting amount in USD.
    :returns: One valued record per input record.
    """
    if not records:
        return ()

    first = records[0]
    gold_units = units_bought(amount, first.gold)
    silver_units = units_bought(amount, first.silver)

    return tuple(
        ValuedRecord(
            date=r.date,
            gold=r.gold,
            silver=r.silver,
            gold_value=gold_units * r.gold,
            silver_value=silver_units * r.silver,
        )
        for r in records
    )


__all__ = ["units_bought", "value_series"]
