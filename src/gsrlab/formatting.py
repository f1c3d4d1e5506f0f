"""Display helpers for amounts and percentages."""

from __future__ import annotations

import math
import re
from typing import Any

_NON_DIGIT_RE = re.compile(r"[^0-9]")


def fmt0(value: Any) -> str:
    """Whole number with thousands separators ("12,346"); non-numbers give "0"."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "0"
    if not math.isfinite(value):
        return "0"
    return f"{math.floor(value + 0.5):,}"


def fmt_usd(value: Any) -> str:
    return f"${fmt0(value)}"


def fmt_pct(value: float, signed: bool = True) -> str:
    if not math.isfinite(value):
        return "0.00%"
    return f"{value:+.2f}%" if signed else f"{value:.2f}%"


def parse_amount(text: Any) -> int:
    """Parse a typed amount, keeping digits only ("$1,000" -> 1000, "" -> 0)."""
    digits = _NON_DIGIT_RE.sub("", str(text if text is not None else ""))
    return int(digits) if digits else 0


__all__ = ["fmt0", "fmt_usd", "fmt_pct", "parse_amount"]
