"""Tests for command configuration loaders."""

import math
from datetime import date
from pathlib import Path

import pytest
import yaml

from gsrlab.commands.compare import (
    apply_overrides,
    load_compare_config,
    parse_compare_config,
    parse_date,
    parse_hidden,
    parse_threshold,
)
from gsrlab.exceptions import ConfigError
from gsrlab.types import CompareConfig, Metal, Visibility

FULL_CONFIG = """
source:
  path: "data/prices.csv"
quotes:
  provider: "yahoo"
  api_key: null
  timeout: 5
amount: 2500
window:
  start: 2010-01-01
  end: "31/12/2020"
strategy:
  g2s_threshold: 80
  s2g_threshold: .inf
  start_metal: GOLD
  conversion_cost: 0.01
show:
  gold: true
  silver: false
logging:
  level: debug
"""


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "compare.yaml"
    path.write_text(text)
    return path


class TestParseDate:
    """Tests for config date parsing."""

    def test_iso_string(self) -> None:
        """Parse YYYY-MM-DD strings."""
        assert parse_date("2015-06-30") == date(2015, 6, 30)

    def test_day_month_year(self) -> None:
        """Parse D/M/Y strings day first."""
        assert parse_date("15/03/2010") == date(2010, 3, 15)

    def test_date_object_passes_through(self) -> None:
        """Date objects (as YAML produces) pass through."""
        assert parse_date(date(2015, 6, 30)) == date(2015, 6, 30)

    @pytest.mark.parametrize("value", ["someday", "", 20150630, None])
    def test_invalid_raises(self, value: object) -> None:
        """Anything else raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid date"):
            parse_date(value, "window.start")


class TestParseThreshold:
    """Tests for threshold parsing."""

    def test_numbers(self) -> None:
        """Numbers become floats."""
        assert parse_threshold(85) == 85.0
        assert parse_threshold("72.5") == 72.5

    def test_null_and_non_finite_disable(self) -> None:
        """null and non-finite values give a disabled (non-finite) threshold."""
        assert math.isnan(parse_threshold(None))
        assert math.isinf(parse_threshold(math.inf))
        assert math.isnan(parse_threshold(math.nan))

    @pytest.mark.parametrize("value", ["high", True, [85]])
    def test_invalid_raises(self, value: object) -> None:
        """Non-numbers raise ConfigError."""
        with pytest.raises(ConfigError, match="must be a number"):
            parse_threshold(value)


def test_parse_hidden() -> None:
    """Hidden series are turned off, the rest stay on."""
    assert parse_hidden("gold, Ratio") == Visibility(gold=False, ratio=False)
    assert parse_hidden("") == Visibility()
    with pytest.raises(ConfigError, match="Unknown series"):
        parse_hidden("platinum")


class TestLoadCompareConfig:
    """Tests for load_compare_config."""

    def test_full_config(self, tmp_path: Path) -> None:
        """Every section is parsed."""
        config = load_compare_config(write_config(tmp_path, FULL_CONFIG))

        assert config.source.path == str(tmp_path / "data" / "prices.csv")
        assert config.quotes.provider == "yahoo"
        assert config.quotes.timeout == 5.0
        assert config.amount == 2500
        assert config.start == date(2010, 1, 1)
        assert config.end == date(2020, 12, 31)
        assert config.strategy.g2s_threshold == 80.0
        assert math.isinf(config.strategy.s2g_threshold)
        assert config.strategy.start_metal is Metal.GOLD
        assert config.strategy.conversion_cost == 0.01
        assert config.show == Visibility(silver=False)
        assert config.log_level == "DEBUG"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """An empty file is a valid, all-defaults config."""
        config = load_compare_config(write_config(tmp_path, ""))

        assert config.amount == 1000
        assert config.start is None
        assert config.strategy.g2s_threshold == 85.0
        assert config.strategy.s2g_threshold == 65.0
        assert config.strategy.start_metal is Metal.SILVER
        assert config.strategy.conversion_cost == 0.03
        assert config.quotes.provider == "metalpriceapi"
        assert config.source.base_dir == str(tmp_path)
        assert config.log_level == "INFO"

    def test_absolute_path_kept(self, tmp_path: Path) -> None:
        """Absolute source paths are not re-rooted."""
        csv_path = tmp_path / "elsewhere.csv"
        text = yaml.safe_dump({"source": {"path": str(csv_path)}})

        config = load_compare_config(write_config(tmp_path, text))

        assert config.source.path == str(csv_path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="Configuration file not found"):
            load_compare_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_compare_config(write_config(tmp_path, "amount: [1000\n"))

    def test_non_mapping(self, tmp_path: Path) -> None:
        """A top-level list is rejected."""
        with pytest.raises(ConfigError, match="must be a YAML mapping"):
            load_compare_config(write_config(tmp_path, "- 1\n- 2\n"))

    @pytest.mark.parametrize(
        "raw,message",
        [
            ({"amount": -1}, "non-negative integer"),
            ({"amount": 10.5}, "non-negative integer"),
            ({"amount": True}, "non-negative integer"),
            ({"strategy": {"conversion_cost": 1.0}}, "conversion_cost"),
            ({"strategy": {"conversion_cost": -0.1}}, "conversion_cost"),
            ({"strategy": {"start_metal": "platinum"}}, "start_metal"),
            ({"strategy": {"g2s_threshold": "high"}}, "g2s_threshold"),
            ({"strategy": "aggressive"}, "'strategy' must be a mapping"),
            ({"quotes": {"provider": "bloomberg"}}, "quotes provider"),
            ({"quotes": {"timeout": 0}}, "quotes.timeout"),
            ({"source": {"path": "a.csv", "base_url": "https://x/"}}, "not both"),
            ({"show": {"platinum": True}}, "Unknown series"),
            ({"show": {"gold": "yes"}}, "show.gold"),
            ({"window": {"start": "someday"}}, "window.start"),
            ({"logging": {"level": "verbose"}}, "Invalid log level"),
        ],
    )
    def test_invalid_values(self, raw: dict, message: str) -> None:
        """Invalid values raise ConfigError naming the problem."""
        with pytest.raises(ConfigError, match=message):
            parse_compare_config(raw)

    def test_null_threshold_disables_trigger(self) -> None:
        """A null threshold is accepted and disables that trigger."""
        config = parse_compare_config({"strategy": {"g2s_threshold": None}})
        assert math.isnan(config.strategy.g2s_threshold)


class TestApplyOverrides:
    """Tests for layering command-line values over a config."""

    def test_no_overrides_keeps_config(self) -> None:
        """With nothing given the config is unchanged."""
        config = CompareConfig()
        assert apply_overrides(config) == config

    def test_source_overrides(self) -> None:
        """--csv and --base-url replace each other."""
        config = parse_compare_config({"source": {"base_url": "https://x/"}})

        updated = apply_overrides(config, csv="local.csv")
        assert (updated.source.path, updated.source.base_url) == ("local.csv", None)

        updated = apply_overrides(updated, base_url="https://y/")
        assert (updated.source.path, updated.source.base_url) == (None, "https://y/")

    def test_csv_and_base_url_together_rejected(self) -> None:
        """Both sources at once is an error."""
        with pytest.raises(ConfigError, match="not both"):
            apply_overrides(CompareConfig(), csv="a.csv", base_url="https://x/")

    def test_strategy_overrides(self) -> None:
        """Strategy flags override only what they name."""
        config = parse_compare_config({"strategy": {"g2s_threshold": 90}})

        updated = apply_overrides(config, s2g=60.0, start_metal="gold", cost=0.05)

        assert updated.strategy.g2s_threshold == 90.0
        assert updated.strategy.s2g_threshold == 60.0
        assert updated.strategy.start_metal is Metal.GOLD
        assert updated.strategy.conversion_cost == 0.05

    def test_window_amount_and_logging(self) -> None:
        """Dates, amount and log level are parsed and applied."""
        updated = apply_overrides(
            CompareConfig(), amount=5000, start="1/2/2015", end="2016-03-04", log_level="warning"
        )

        assert updated.amount == 5000
        assert updated.start == date(2015, 2, 1)
        assert updated.end == date(2016, 3, 4)
        assert updated.log_level == "WARNING"

    def test_no_topup_and_hide(self) -> None:
        """--no-topup disables quotes and --hide sets visibility."""
        updated = apply_overrides(CompareConfig(), no_topup=True, hide="ratio")

        assert updated.quotes.provider == "none"
        assert updated.show == Visibility(ratio=False)

    def test_invalid_override_rejected(self) -> None:
        """Overrides are validated like config values."""
        with pytest.raises(ConfigError):
            apply_overrides(CompareConfig(), cost=2.0)
        with pytest.raises(ConfigError):
            apply_overrides(CompareConfig(), log_level="loud")
