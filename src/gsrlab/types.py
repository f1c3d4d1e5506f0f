"""Core type definitions for gsrlab.

All data models use Pydantic BaseModel for automatic validation, JSON
serialization, and better error messages. Records are frozen: every derived
structure is rebuilt wholesale when its inputs change, never patched in place.
"""

from __future__ import annotations

import datetime as dt
import math
from enum import Enum
from functools import cached_property
from typing import Iterator, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from gsrlab.dates import to_key
from gsrlab.exceptions import DataValidationError

# Domain sentinel handed to the rendering layer when no explicit bounds exist.
AUTO = "auto"


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Metal(str, Enum):
    """Metal held by a position."""

    GOLD = "gold"
    SILVER = "silver"

    @property
    def label(self) -> str:
        """Upper-case display form ("GOLD" / "SILVER")."""
        return self.value.upper()

    @property
    def other(self) -> Metal:
        return Metal.SILVER if self is Metal.GOLD else Metal.GOLD


class AxisMode(str, Enum):
    """Which kinds of series are on the chart, driving axis assignment."""

    NONE = "none"
    RATIO_BOTH = "ratio_both"
    USD_BOTH = "usd_both"
    MIXED = "mixed"


# ---------------------------------------------------------------------------
# Market Data Types
# ---------------------------------------------------------------------------


class PriceRecord(FrozenModel):
    """One day of gold and silver prices.

    The gold/silver ratio is always derived from the two prices and is never
    stored on its own.

    :param date: Calendar date of the quote.
    :param gold: Gold price in USD per troy ounce.
    :param silver: Silver price in USD per troy ounce.
    :raises DataValidationError: If a price is not finite or silver is zero.
    """

    date: dt.date
    gold: float
    silver: float

    @model_validator(mode="after")
    def check_prices(self) -> PriceRecord:
        if not (math.isfinite(self.gold) and math.isfinite(self.silver)):
            raise DataValidationError(f"Non-finite price on {self.date}")
        if self.silver == 0:
            raise DataValidationError(f"Silver price is zero on {self.date}")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def gsr(self) -> float:
        """Gold/silver ratio for this date."""
        return self.gold / self.silver

    @property
    def key(self) -> str:
        """ISO "YYYY-MM-DD" key used for indexing."""
        return to_key(self.date)

    def price(self, metal: Metal) -> float:
        """Price of ``metal`` on this date."""
        return self.gold if metal is Metal.GOLD else self.silver


class ValuedRecord(PriceRecord):
    """Price record marked to market for both buy-and-hold positions.

    :param gold_value: USD value of the gold bought on the window's first day.
    :param silver_value: USD value of the silver bought on the window's first day.
    """

    gold_value: float
    silver_value: float


class SimulatedRecord(ValuedRecord):
    """Valued record extended with the switching strategy's state.

    :param strategy_value: USD value of the switching portfolio.
    :param held_metal: Metal held after this record's transition (if any).
    :param switch_count: Switches made up to and including this record.
    """

    strategy_value: float
    held_metal: Metal
    switch_count: int = Field(ge=0)


class Series(FrozenModel):
    """Date-ordered price records with at most one record per calendar date.

    :param records: Records sorted strictly ascending by date.
    :raises DataValidationError: If records are out of order or repeat a date.
    """

    records: tuple[PriceRecord, ...] = ()

    @model_validator(mode="after")
    def check_order(self) -> Series:
        for prev, cur in zip(self.records, self.records[1:]):
            if cur.date <= prev.date:
                raise DataValidationError(
                    f"Series must be strictly ascending by date: {prev.date} then {cur.date}"
                )
        return self

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PriceRecord]:  # type: ignore[override]
        return iter(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    @cached_property
    def records_by_key(self) -> dict[str, PriceRecord]:
        return {r.key: r for r in self.records}

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(self.records_by_key)

    def has_key(self, key: str) -> bool:
        return key in self.records_by_key

    def get(self, key: str) -> PriceRecord | None:
        """Record for an ISO key, or None if the date is absent."""
        return self.records_by_key.get(key)

    @property
    def first_date(self) -> dt.date | None:
        return self.records[0].date if self.records else None

    @property
    def last_date(self) -> dt.date | None:
        return self.records[-1].date if self.records else None

    @property
    def min_key(self) -> str:
        return self.records[0].key if self.records else ""

    @property
    def max_key(self) -> str:
        return self.records[-1].key if self.records else ""

    def between(self, start: dt.date, end: dt.date) -> Series:
        """Records with ``start <= date <= end`` (both inclusive)."""
        return Series(records=tuple(r for r in self.records if start <= r.date <= end))


class IngestResult(FrozenModel):
    """Output of the ingestion pipeline.

    :param series: The ingested series.
    :param topped_up: Whether a live quote was appended for today.
    """

    series: Series
    topped_up: bool = False

    @property
    def default_window(self) -> Window:
        """Full-range window used to initialize an unset selection."""
        return Window(start_key=self.series.min_key, end_key=self.series.max_key)


# ---------------------------------------------------------------------------
# Window / Strategy / Statistics Types
# ---------------------------------------------------------------------------


class Window(FrozenModel):
    """Inclusive date window expressed as ISO keys.

    Empty keys mean the caller has not established a selection yet.
    """

    start_key: str = ""
    end_key: str = ""


class SwitchSettings(FrozenModel):
    """Parameters of the threshold-switching strategy.

    :param g2s_threshold: Ratio at or above which gold is switched to silver.
    :param s2g_threshold: Ratio at or below which silver is switched to gold.
    :param start_metal: Metal bought on the window's first record.
    :param conversion_cost: Fraction of value lost on each switch.
    """

    g2s_threshold: float = 85.0
    s2g_threshold: float = 65.0
    start_metal: Metal = Metal.SILVER
    conversion_cost: float = Field(default=0.03, ge=0.0, lt=1.0)


class SimulationResult(FrozenModel):
    """Per-record output of one strategy run.

    :param records: Simulated records in date order.
    :param ends_in: Metal held after the last record.
    :param switches: Total number of switches.
    """

    records: tuple[SimulatedRecord, ...] = ()
    ends_in: Metal = Metal.GOLD
    switches: int = 0


class SummaryStats(FrozenModel):
    """End-of-window comparison of the three strategies.

    Percent values are expressed in percent (12.5 = 12.5%).
    """

    amount: int
    gold_value: float
    silver_value: float
    strategy_value: float
    gold_change: float = 0.0
    silver_change: float = 0.0
    strategy_change: float = 0.0
    gold_return_pct: float = 0.0
    silver_return_pct: float = 0.0
    strategy_return_pct: float = 0.0
    vs_gold_pct: float = 0.0
    vs_silver_pct: float = 0.0
    beats_gold_pct: float = 0.0
    beats_silver_pct: float = 0.0
    switches: int = 0
    ends_in: str = "GOLD"
    years: int = 0
    months: int = 0
    duration_text: str = ""
    start_ratio: float | None = None
    end_ratio: float | None = None
    record_count: int = 0


# ---------------------------------------------------------------------------
# Chart Types
# ---------------------------------------------------------------------------


class Visibility(FrozenModel):
    """Which chart series are toggled on."""

    gold: bool = True
    silver: bool = True
    strategy: bool = True
    ratio: bool = True

    @property
    def any_usd(self) -> bool:
        return self.gold or self.silver or self.strategy


class AxisSpec(FrozenModel):
    """Axis domain and tick positions.

    ``domain`` is ``("auto", "auto")`` with ``ticks`` None when the data gave
    nothing to scale; the rendering layer then applies its own defaults.
    """

    domain: Union[tuple[float, float], tuple[str, str]] = (AUTO, AUTO)
    ticks: tuple[float, ...] | None = None

    @property
    def is_auto(self) -> bool:
        return self.ticks is None


class AxisLayout(FrozenModel):
    """Left/right axis assignment for the current visibility toggles.

    :param mode: Which kinds of series are visible.
    :param left: Left axis domain and ticks.
    :param right: Right axis domain and ticks.
    :param left_label: Left axis caption ("" when nothing is visible).
    :param right_label: Right axis caption.
    :param usd_axis: Side ("left" or "right") the USD series are drawn on.
    :param ratio_axis: Side the ratio series is drawn on.
    """

    mode: AxisMode
    left: AxisSpec
    right: AxisSpec
    left_label: str = ""
    right_label: str = ""
    usd_axis: str = "left"
    ratio_axis: str = "left"


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class SourceConfig(FrozenModel):
    """Where to read the price table from.

    :param path: Explicit local file path.
    :param base_dir: Directory searched for the default candidate files.
    :param base_url: HTTP base URL searched for the default candidate files.
    :param timeout: HTTP timeout in seconds.
    """

    path: str | None = None
    base_dir: str | None = None
    base_url: str | None = None
    timeout: float = 30.0


class QuoteConfig(FrozenModel):
    """Live quote source used to top up the series.

    :param provider: "metalpriceapi", "yahoo" or "none".
    :param api_key: MetalPriceAPI key (falls back to ``$METAL_API_KEY``).
    :param timeout: HTTP timeout in seconds.
    """

    provider: str = "metalpriceapi"
    api_key: str | None = None
    timeout: float = 10.0


class CompareConfig(FrozenModel):
    """Configuration for one comparison run.

    :param source: Price table location.
    :param quotes: Live quote top-up settings.
    :param amount: Starting amount in whole USD.
    :param start: Requested window start (None = first available date).
    :param end: Requested window end (None = last available date).
    :param strategy: Switching strategy parameters.
    :param show: Chart visibility toggles.
    :param log_level: Logging level name.
    """

    source: SourceConfig = Field(default_factory=SourceConfig)
    quotes: QuoteConfig = Field(default_factory=QuoteConfig)
    amount: int = Field(default=1000, ge=0)
    start: dt.date | None = None
    end: dt.date | None = None
    strategy: SwitchSettings = Field(default_factory=SwitchSettings)
    show: Visibility = Field(default_factory=Visibility)
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    "AUTO",
    # Base models
    "FrozenModel",
    # Enums
    "Metal",
    "AxisMode",
    # Market data
    "PriceRecord",
    "ValuedRecord",
    "SimulatedRecord",
    "Series",
    "IngestResult",
    # Window / strategy / statistics
    "Window",
    "SwitchSettings",
    "SimulationResult",
    "SummaryStats",
    # Charts
    "Visibility",
    "AxisSpec",
    "AxisLayout",
    # Configuration
    "SourceConfig",
    "QuoteConfig",
    "CompareConfig",
]
