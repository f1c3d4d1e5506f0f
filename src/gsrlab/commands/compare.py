"""Configuration for the compare, series and axes commands.

Example config file (compare.yaml):

    source:
      path: "data/prices.csv"      # or base_url: "https://host/app/"
    quotes:
      provider: "metalpriceapi"    # metalpriceapi | yahoo | none
      api_key: null                # falls back to $METAL_API_KEY
      timeout: 10
    amount: 1000
    window:
      start: "2010-01-01"
      end: "2020-12-31"
    strategy:
      g2s_threshold: 85
      s2g_threshold: 65
      start_metal: silver
      conversion_cost: 0.03
    show: {gold: true, silver: true, strategy: true, ratio: true}
    logging:
      level: INFO

Every section is optional. A relative ``source.path`` is resolved against
the directory holding the config file.
"""

from __future__ import annotations

import datetime as dt
import math
from pathlib import Path
from typing import Any

import yaml

from gsrlab.dates import from_key, parse_flexible
from gsrlab.exceptions import ConfigError
from gsrlab.types import (
    CompareConfig,
    Metal,
    QuoteConfig,
    SourceConfig,
    SwitchSettings,
    Visibility,
)

# Logging levels accepted in config files and on the command line
VALID_LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

# Live quote providers
VALID_PROVIDERS = frozenset(["metalpriceapi", "yahoo", "none"])

SERIES_NAMES = ("gold", "silver", "strategy", "ratio")


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw_config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_date(value: Any, field: str = "date") -> dt.date:
    """Parse a config date.

    :param value: ``date`` object, "YYYY-MM-DD" or "D/M/Y" string.
    :param field: Field name used in error messages.
    :raises ConfigError: If the value is not a recognisable date.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        parsed = from_key(value.strip()) or parse_flexible(value)
        if parsed is not None:
            return parsed
    raise ConfigError(f"Invalid date for '{field}': {value!r}")


def parse_threshold(value: Any, field: str = "threshold") -> float:
    """Parse a switching threshold.

    ``null`` disables the trigger, as does any non-finite number.

    :raises ConfigError: If the value is not a number.
    """
    if value is None:
        return math.nan
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise ConfigError(f"'{field}' must be a number, got {value!r}") from e
    if not _is_number(value):
        raise ConfigError(f"'{field}' must be a number, got {value!r}")
    return float(value)


def parse_metal(value: Any) -> Metal:
    """Parse "gold" / "silver" in any case."""
    if isinstance(value, Metal):
        return value
    if isinstance(value, str):
        try:
            return Metal(value.strip().lower())
        except ValueError:
            pass
    raise ConfigError(f"Invalid start_metal '{value}'. Valid options: ['gold', 'silver']")


def parse_amount_value(value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ConfigError(f"'amount' must be a non-negative integer, got {value!r}")
    return value


def parse_cost(value: Any) -> float:
    if not _is_number(value) or not 0 <= value < 1:
        raise ConfigError(f"'conversion_cost' must be a number in [0, 1), got {value!r}")
    return float(value)


def parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Invalid log level '{value}'. Valid options: {sorted(VALID_LOG_LEVELS)}"
        )
    return level


def parse_hidden(text: str) -> Visibility:
    """Build visibility toggles from a comma-separated list of hidden series.

    :param text: e.g. "gold,ratio".
    :raises ConfigError: On an unknown series name.
    """
    hidden = {name.strip().lower() for name in text.split(",") if name.strip()}
    unknown = hidden - set(SERIES_NAMES)
    if unknown:
        raise ConfigError(
            f"Unknown series {sorted(unknown)}. Valid options: {list(SERIES_NAMES)}"
        )
    return Visibility(**{name: name not in hidden for name in SERIES_NAMES})


def _parse_source(raw: dict[str, Any], base_dir: Path | None) -> SourceConfig:
    path = raw.get("path")
    base_url = raw.get("base_url")
    if path is not None and base_url is not None:
        raise ConfigError("'source' accepts either 'path' or 'base_url', not both")

    if path is not None:
        path = Path(str(path))
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path

    timeout = raw.get("timeout", 30.0)
    if not _is_number(timeout) or timeout <= 0:
        raise ConfigError(f"'source.timeout' must be a positive number, got {timeout!r}")

    return SourceConfig(
        path=str(path) if path is not None else None,
        base_dir=str(base_dir) if base_dir is not None else None,
        base_url=str(base_url) if base_url is not None else None,
        timeout=float(timeout),
    )


def _parse_quotes(raw: dict[str, Any]) -> QuoteConfig:
    provider = str(raw.get("provider", "metalpriceapi")).lower()
    if provider not in VALID_PROVIDERS:
        raise ConfigError(
            f"Invalid quotes provider '{provider}'. "
            f"Valid options: {sorted(VALID_PROVIDERS)}"
        )

    timeout = raw.get("timeout", 10.0)
    if not _is_number(timeout) or timeout <= 0:
        raise ConfigError(f"'quotes.timeout' must be a positive number, got {timeout!r}")

    api_key = raw.get("api_key")
    return QuoteConfig(
        provider=provider,
        api_key=str(api_key) if api_key is not None else None,
        timeout=float(timeout),
    )


def _parse_strategy(raw: dict[str, Any]) -> SwitchSettings:
    defaults = SwitchSettings()
    return SwitchSettings(
        g2s_threshold=parse_threshold(
            raw.get("g2s_threshold", defaults.g2s_threshold), "g2s_threshold"
        ),
        s2g_threshold=parse_threshold(
            raw.get("s2g_threshold", defaults.s2g_threshold), "s2g_threshold"
        ),
        start_metal=parse_metal(raw.get("start_metal", defaults.start_metal)),
        conversion_cost=parse_cost(raw.get("conversion_cost", defaults.conversion_cost)),
    )


def _parse_show(raw: dict[str, Any]) -> Visibility:
    unknown = set(raw) - set(SERIES_NAMES)
    if unknown:
        raise ConfigError(
            f"Unknown series in 'show': {sorted(unknown)}. Valid options: {list(SERIES_NAMES)}"
        )
    for name, value in raw.items():
        if not isinstance(value, bool):
            raise ConfigError(f"'show.{name}' must be true or false")
    return Visibility(**raw)


def parse_compare_config(raw_config: Any, base_dir: Path | None = None) -> CompareConfig:
    """Validate an already-loaded config mapping.

    :param raw_config: Parsed YAML document (None is treated as empty).
    :param base_dir: Directory relative source paths are resolved against.
    :raises ConfigError: If any value is invalid.
    """
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    window = _section(raw_config, "window")
    start = window.get("start")
    end = window.get("end")

    return CompareConfig(
        source=_parse_source(_section(raw_config, "source"), base_dir),
        quotes=_parse_quotes(_section(raw_config, "quotes")),
        amount=parse_amount_value(raw_config.get("amount", 1000)),
        start=parse_date(start, "window.start") if start is not None else None,
        end=parse_date(end, "window.end") if end is not None else None,
        strategy=_parse_strategy(_section(raw_config, "strategy")),
        show=_parse_show(_section(raw_config, "show")),
        log_level=parse_log_level(_section(raw_config, "logging").get("level", "INFO")),
    )


def load_compare_config(config_path: str | Path) -> CompareConfig:
    """Parse and validate a compare configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated CompareConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    return parse_compare_config(raw_config, base_dir=config_path.parent)


def apply_overrides(
    config: CompareConfig,
    *,
    csv: str | None = None,
    base_url: str | None = None,
    amount: int | None = None,
    start: Any = None,
    end: Any = None,
    g2s: float | None = None,
    s2g: float | None = None,
    start_metal: str | None = None,
    cost: float | None = None,
    no_topup: bool = False,
    hide: str | None = None,
    log_level: str | None = None,
) -> CompareConfig:
    """Layer command-line values over a loaded config.

    Arguments left as None keep the config's value.

    :raises ConfigError: If an override is invalid.
    """
    if csv is not None and base_url is not None:
        raise ConfigError("Use either --csv or --base-url, not both")

    source = config.source
    if csv is not None:
        source = source.model_copy(update={"path": csv, "base_url": None})
    elif base_url is not None:
        source = source.model_copy(update={"path": None, "base_url": base_url})

    quotes = config.quotes
    if no_topup:
        quotes = quotes.model_copy(update={"provider": "none"})

    strategy_updates: dict[str, Any] = {}
    if g2s is not None:
        strategy_updates["g2s_threshold"] = parse_threshold(g2s, "g2s_threshold")
    if s2g is not None:
        strategy_updates["s2g_threshold"] = parse_threshold(s2g, "s2g_threshold")
    if start_metal is not None:
        strategy_updates["start_metal"] = parse_metal(start_metal)
    if cost is not None:
        strategy_updates["conversion_cost"] = parse_cost(cost)

    updates: dict[str, Any] = {"source": source, "quotes": quotes}
    if strategy_updates:
        updates["strategy"] = config.strategy.model_copy(update=strategy_updates)
    if amount is not None:
        updates["amount"] = parse_amount_value(amount)
    if start is not None:
        updates["start"] = parse_date(start, "start")
    if end is not None:
        updates["end"] = parse_date(end, "end")
    if hide is not None:
        updates["show"] = parse_hidden(hide)
    if log_level is not None:
        updates["log_level"] = parse_log_level(log_level)

    return config.model_copy(update=updates)


__all__ = [
    "VALID_LOG_LEVELS",
    "VALID_PROVIDERS",
    "apply_overrides",
    "load_compare_config",
    "parse_compare_config",
    "parse_date",
    "parse_hidden",
    "parse_threshold",
]
