"""
Spendsight - Personal Finance Analytics over Excel Exports

Reads the remittance, card transaction, rewards and travel-wallet workbooks
exported from a banking app and answers questions about them: spending by
period, trips abroad, money sent home, and rewards earned.

Domain Packages:
- core: Configuration, dates, periods, currency and row helpers
- workbook: Excel workbook loading (including encrypted files)
- cache: Memory and file-backed caching of parsed workbooks
- data: Dataset access service
- analysis: Spending, remittance and rewards analytics
- travel: Trip segmentation and travel analytics
- cli: Command-line interface (spendsight)
- api: HTTP API (FastAPI)

Example Usage:
    from spendsight.core.periods import resolve_period
    from spendsight.travel import segment_trips

Version: 0.3.0
"""

__version__ = "0.3.0"
__author__ = "Spendsight Developers"

from .core.config import Environment, get_config
from .core.periods import Period, resolve_period
from .travel.models import Trip
from .travel.trips import segment_trips

__all__ = [
    # Configuration
    "get_config",
    "Environment",
    # Periods
    "Period",
    "resolve_period",
    # Travel
    "Trip",
    "segment_trips",
]
