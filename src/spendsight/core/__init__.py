"""
Core Utilities Package

Shared building blocks used by every analytics domain.

This package provides:
- Environment-based configuration
- Timestamp parsing for the mixed date formats found in the workbooks
- Period token resolution
- Decimal amount parsing and rounding
- Row field lookup, classification and period filtering
"""

from .config import Config, Environment, get_config, reload_config
from .currency import parse_amount, round_money
from .dates import parse_timestamp
from .periods import ALL_TIME, Period, PeriodKind, resolve_period

__all__ = [
    "ALL_TIME",
    "Config",
    "Environment",
    "Period",
    "PeriodKind",
    "get_config",
    "parse_amount",
    "parse_timestamp",
    "reload_config",
    "resolve_period",
    "round_money",
]
