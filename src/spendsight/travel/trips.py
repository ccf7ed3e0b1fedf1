#!/usr/bin/env python3
"""
Trip Segmentation

Reconstructs trips from an unordered stream of travel-card transactions.

There is no itinerary data, so trips are inferred: transactions are walked
in date order and a new trip starts whenever the country changes or more
than ``gap`` has passed since the previous transaction of the open trip.
Two short visits to the same country within the gap therefore merge into
one trip; that is accepted behavior of the heuristic.

Domestic activity (the home country) and rows with an unknown country never
form trips and never break them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from ..core.currency import ZERO
from ..core.records import (
    TRAVEL_AMOUNT_FIELDS,
    TRAVEL_DATE_FIELDS,
    UNKNOWN_COUNTRY,
    Row,
    amount_field,
    is_load,
    row_country,
    row_date,
)
from .models import Trip, make_trip_id

logger = logging.getLogger(__name__)

DEFAULT_HOME_COUNTRY = "Bahrain"
DEFAULT_TRIP_GAP = timedelta(days=7)


@dataclass
class _OpenTrip:
    """Mutable accumulator for the trip currently being extended."""

    trip_id: str
    country: str
    start: datetime
    end: datetime
    transaction_count: int = 0
    total_spend: Decimal = ZERO

    def close(self) -> Trip:
        return Trip(
            trip_id=self.trip_id,
            country=self.country,
            start=self.start,
            end=self.end,
            transaction_count=self.transaction_count,
            total_spend=self.total_spend,
        )


def dated_foreign_rows(
    rows: Iterable[Row], home_country: str = DEFAULT_HOME_COUNTRY
) -> list[tuple[datetime, str, Row]]:
    """
    Foreign rows with a parseable date, as (date, country, row), oldest first.

    The sort is stable, so same-timestamp rows keep their input order.
    """
    dated: list[tuple[datetime, str, Row]] = []
    skipped = 0
    for row in rows:
        parsed = row_date(row, TRAVEL_DATE_FIELDS)
        if parsed is None:
            skipped += 1
            continue
        country = row_country(row)
        if country in (UNKNOWN_COUNTRY, home_country):
            continue
        dated.append((parsed, country, row))

    if skipped:
        logger.debug("Skipped %d travel rows without a parseable date", skipped)

    dated.sort(key=lambda item: item[0])
    return dated


def segment_trips(
    rows: Iterable[Row],
    home_country: str = DEFAULT_HOME_COUNTRY,
    gap: timedelta = DEFAULT_TRIP_GAP,
) -> list[Trip]:
    """
    Group travel transactions into trips, oldest trip first.

    Args:
        rows: Travel-card transaction rows (not modified)
        home_country: Country whose activity is domestic and ignored
        gap: Inactivity longer than this starts a new trip

    Returns:
        List of Trip objects ordered by start date
    """
    trips: list[Trip] = []
    current: _OpenTrip | None = None

    for txn_date, country, row in dated_foreign_rows(rows, home_country):
        # New trip on first row, country change, or a gap since the last transaction
        if current is None or current.country != country or txn_date - current.end > gap:
            if current is not None:
                trips.append(current.close())
            current = _OpenTrip(
                trip_id=make_trip_id(country, txn_date),
                country=country,
                start=txn_date,
                end=txn_date,
            )

        current.end = txn_date
        current.transaction_count += 1
        if not is_load(row):
            current.total_spend += amount_field(row, TRAVEL_AMOUNT_FIELDS)

    if current is not None:
        trips.append(current.close())

    logger.debug("Segmented %d trips", len(trips))
    return trips


def find_trip(trips: Iterable[Trip], trip_id: str) -> Trip | None:
    """Exact-match lookup of a trip id."""
    for trip in trips:
        if trip.trip_id == trip_id:
            return trip
    return None
