#!/usr/bin/env python3
"""Command-line interface for the gold/silver ratio explorer."""

from __future__ import annotations

import argparse
import logging
import math
import sys

from gsrlab.exceptions import GsrError
from gsrlab.formatting import fmt_pct, fmt_usd, parse_amount
from gsrlab.types import AxisSpec, CompareConfig, IngestResult

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Rows printed by --show-series before truncating
MAX_SERIES_ROWS = 20


def load_config(args: argparse.Namespace) -> CompareConfig:
    """Load the config file (if any) and apply command-line overrides."""
    from gsrlab.commands.compare import apply_overrides, load_compare_config

    config = load_compare_config(args.config) if args.config else CompareConfig()
    return apply_overrides(
        config,
        csv=args.csv,
        base_url=args.base_url,
        amount=getattr(args, "amount", None),
        start=getattr(args, "start", None),
        end=getattr(args, "end", None),
        g2s=getattr(args, "g2s", None),
        s2g=getattr(args, "s2g", None),
        start_metal=getattr(args, "start_metal", None),
        cost=getattr(args, "cost", None),
        no_topup=args.no_topup,
        hide=getattr(args, "hide", None),
        log_level=args.log_level,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


def load_series(config: CompareConfig) -> IngestResult:
    """Ingest the configured price table and top it up if enabled."""
    from gsrlab.data import ingest, resolve_quote_source, resolve_text_source

    source = resolve_text_source(config.source)
    quote_source = resolve_quote_source(config.quotes)
    return ingest(source, quote_source)


def run_comparison(config: CompareConfig, series_result: IngestResult):
    from gsrlab.dates import to_key
    from gsrlab.engine import Comparison

    comparison = Comparison(
        series_result.series,
        amount=config.amount,
        settings=config.strategy,
        show=config.show,
    )
    return comparison.run(
        to_key(config.start) if config.start else None,
        to_key(config.end) if config.end else None,
    )


def format_threshold(value: float) -> str:
    return f"{value:g}" if math.isfinite(value) else "off"


def format_axis(axis: AxisSpec) -> str:
    if axis.is_auto:
        return "auto"
    low, high = axis.domain
    ticks = ", ".join(f"{t:g}" for t in axis.ticks or ())
    return f"[{low:g}, {high:g}]  ticks: {ticks}"


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare buy-and-hold gold, buy-and-hold silver and ratio switching."""
    try:
        config = load_config(args)
    except GsrError as e:
        print(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level)
    settings = config.strategy

    print("=" * 60)
    print("GOLD / SILVER COMPARISON")
    print("=" * 60)
    print(f"Amount:      {fmt_usd(config.amount)}")
    print(f"Start metal: {settings.start_metal.label}")
    print(
        f"Thresholds:  G->S at {format_threshold(settings.g2s_threshold)}, "
        f"S->G at {format_threshold(settings.s2g_threshold)}"
    )
    print(f"Cost:        {settings.conversion_cost:.2%} per switch")

    print("\n📊 Loading prices...")
    try:
        series_result = load_series(config)
    except GsrError as e:
        print(f"Failed to load prices: {e}")
        return 1

    series = series_result.series
    print(f"   Loaded {len(series)} records")
    if series_result.topped_up:
        print(f"   Added live quote for {series.last_date}")

    result = run_comparison(config, series_result)
    stats = result.stats

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    if not result.records:
        print("No data in the selected window.")
    else:
        print(f"Window:      {result.window.start_key} to {result.window.end_key} ({stats.duration_text})")
        if stats.start_ratio is not None:
            print(f"Start ratio: {stats.start_ratio:.2f}")
        if stats.end_ratio is not None:
            print(f"End ratio:   {stats.end_ratio:.2f}")

    print(f"\n{'':<10} {'End value':>12} {'Change':>12} {'Return':>10}")
    print("-" * 48)
    rows = [
        ("Gold", stats.gold_value, stats.gold_change, stats.gold_return_pct),
        ("Silver", stats.silver_value, stats.silver_change, stats.silver_return_pct),
        ("Strategy", stats.strategy_value, stats.strategy_change, stats.strategy_return_pct),
    ]
    for name, value, change, pct in rows:
        sign = "-" if change < 0 else "+"
        print(f"{name:<10} {fmt_usd(value):>12} {sign + fmt_usd(abs(change)):>12} {fmt_pct(pct):>10}")

    print(f"\nvs Gold:     {fmt_pct(stats.vs_gold_pct)}  (beats gold {stats.beats_gold_pct:.1f}% of days)")
    print(f"vs Silver:   {fmt_pct(stats.vs_silver_pct)}  (beats silver {stats.beats_silver_pct:.1f}% of days)")
    print(f"Switches:    {stats.switches}")
    print(f"Ends in:     {stats.ends_in}")

    if args.show_series and result.records:
        print(f"\n📋 Series ({len(result.records)} records):")
        for r in result.records[:MAX_SERIES_ROWS]:
            print(
                f"   {r.key} | gsr {r.gsr:7.2f} | gold {fmt_usd(r.gold_value):>10} | "
                f"silver {fmt_usd(r.silver_value):>10} | strategy {fmt_usd(r.strategy_value):>10} "
                f"| {r.held_metal.label}"
            )
        if len(result.records) > MAX_SERIES_ROWS:
            print(f"   ... and {len(result.records) - MAX_SERIES_ROWS} more records")

    return 0


def cmd_series(args: argparse.Namespace) -> int:
    """Ingest the price table and describe it."""
    try:
        config = load_config(args)
    except GsrError as e:
        print(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level)

    try:
        series_result = load_series(config)
    except GsrError as e:
        print(f"Failed to load prices: {e}")
        return 1

    series = series_result.series
    print("=" * 60)
    print("PRICE SERIES")
    print("=" * 60)
    print(f"Records:     {len(series)}")
    if series:
        print(f"First date:  {series.first_date}")
        print(f"Last date:   {series.last_date}")
        print(f"Last ratio:  {series.records[-1].gsr:.2f}")
    print(f"Topped up:   {'yes' if series_result.topped_up else 'no'}")

    return 0


def cmd_axes(args: argparse.Namespace) -> int:
    """Print the chart axis layout for a comparison window."""
    try:
        config = load_config(args)
    except GsrError as e:
        print(f"Configuration error: {e}")
        return 1

    configure_logging(config.log_level)

    try:
        series_result = load_series(config)
    except GsrError as e:
        print(f"Failed to load prices: {e}")
        return 1

    axes = run_comparison(config, series_result).axes

    print("=" * 60)
    print(f"AXES ({axes.mode.value})")
    print("=" * 60)
    print(f"Left  [{axes.left_label or '-'}]: {format_axis(axes.left)}")
    print(f"Right [{axes.right_label or '-'}]: {format_axis(axes.right)}")
    print(f"USD series on:   {axes.usd_axis}")
    print(f"Ratio series on: {axes.ratio_axis}")

    return 0


def add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", help="Path to YAML configuration file")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--csv", help="Path to the price table")
    source.add_argument("--base-url", help="Base URL serving prices.csv")
    parser.add_argument(
        "--no-topup", action="store_true", help="Don't append today's live quote"
    )
    parser.add_argument(
        "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )


def add_compare_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-a", "--amount", type=parse_amount, help="Starting amount in USD (e.g. 1,000)"
    )
    parser.add_argument("--start", help="Window start (YYYY-MM-DD or D/M/Y)")
    parser.add_argument("--end", help="Window end (YYYY-MM-DD or D/M/Y)")
    parser.add_argument(
        "--g2s", type=float, help="Gold->silver ratio threshold (default: 85)"
    )
    parser.add_argument(
        "--s2g", type=float, help="Silver->gold ratio threshold (default: 65)"
    )
    parser.add_argument(
        "--start-metal", choices=["gold", "silver"], help="Metal held first (default: silver)"
    )
    parser.add_argument(
        "--cost", type=float, help="Conversion cost per switch (default: 0.03)"
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Gold/silver ratio explorer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Compare buy-and-hold against ratio switching"
    )
    add_source_arguments(compare_parser)
    add_compare_arguments(compare_parser)
    compare_parser.add_argument(
        "--show-series", action="store_true", help="Show per-record values"
    )

    # Series command
    series_parser = subparsers.add_parser("series", help="Load and describe the price table")
    add_source_arguments(series_parser)

    # Axes command
    axes_parser = subparsers.add_parser("axes", help="Show chart axis domains and ticks")
    add_source_arguments(axes_parser)
    add_compare_arguments(axes_parser)
    axes_parser.add_argument(
        "--hide", help="Comma-separated series to hide (gold,silver,strategy,ratio)"
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "compare":
        return cmd_compare(args)
    elif args.command == "series":
        return cmd_series(args)
    elif args.command == "axes":
        return cmd_axes(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
