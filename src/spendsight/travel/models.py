#!/usr/bin/env python3
"""
Travel Domain Models

Trip records reconstructed from travel-card transactions.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from ..core.currency import round_money
from ..core.dates import format_date


class TripNotFoundError(LookupError):
    """Raised when a trip id is not among the recomputed trips."""

    def __init__(self, trip_id: str):
        super().__init__(f"Trip not found: {trip_id}")
        self.trip_id = trip_id


def make_trip_id(country: str, first_date: datetime) -> str:
    """
    Deterministic trip id from the country and first transaction date.

    Whitespace is stripped so multi-word countries stay a single token.

    Example:
        make_trip_id("Sri Lanka", datetime(2024, 3, 5)) -> "SriLanka_202403_5"
    """
    raw_id = f"{country}_{first_date.year}{first_date.month:02d}_{first_date.day}"
    return "".join(raw_id.split())


@dataclass(frozen=True)
class Trip:
    """
    A contiguous run of foreign transactions in one country.

    Every member transaction has this trip's country and a date within
    [start, end]. total_spend excludes wallet loads.
    """

    trip_id: str
    country: str
    start: datetime
    end: datetime
    transaction_count: int
    total_spend: Decimal

    @property
    def duration_days(self) -> int:
        """Calendar span of the trip, counting both ends."""
        return math.ceil((self.end - self.start).total_seconds() / 86400) + 1

    @property
    def span_days(self) -> float:
        """Fractional days between first and last transaction, plus one."""
        return (self.end - self.start).total_seconds() / 86400 + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "trip_id": self.trip_id,
            "country": self.country,
            "start_date": format_date(self.start),
            "end_date": format_date(self.end),
            "transaction_count": self.transaction_count,
            "total_spend": round_money(self.total_spend),
        }
