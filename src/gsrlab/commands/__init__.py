"""CLI command implementations for gsrlab.

Each command module provides configuration loading and validation for the
commands exposed by :mod:`gsrlab.cli`.
"""

from gsrlab.commands.compare import apply_overrides, load_compare_config

__all__ = [
    "apply_overrides",
    "load_compare_config",
]
