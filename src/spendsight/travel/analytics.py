#!/usr/bin/env python3
"""
Travel Analytics

Trip-level reporting on top of trip segmentation: trip listings, per-trip
category breakdowns, wallet load vs spend, trip comparison and currency mix.

Trip ids are not stored anywhere; each call recomputes the trips from the
full transaction set and looks the requested id up by exact match.
"""

from collections import defaultdict
from collections.abc import Sequence
from datetime import timedelta
from decimal import Decimal
from typing import Any

from ..core.config import TravelConfig
from ..core.currency import ZERO, round_money
from ..core.dates import format_date
from ..core.periods import ALL_TIME, Period
from ..core.records import (
    FOREIGN_AMOUNT_FIELDS,
    TRAVEL_AMOUNT_FIELDS,
    TRAVEL_CATEGORY_FIELDS,
    TRAVEL_DATE_FIELDS,
    Row,
    UnparseablePolicy,
    amount_field,
    filter_by_period,
    is_load,
    row_country,
    row_date,
    text_field,
)
from .models import Trip, TripNotFoundError
from .trips import find_trip, segment_trips


def _settings(settings: TravelConfig | None) -> TravelConfig:
    return settings or TravelConfig()


def compute_trips(rows: Sequence[Row], settings: TravelConfig | None = None) -> list[Trip]:
    """Segment rows into trips using the configured home country and gap."""
    travel = _settings(settings)
    return segment_trips(rows, home_country=travel.home_country, gap=timedelta(days=travel.trip_gap_days))


def get_trip(rows: Sequence[Row], trip_id: str, settings: TravelConfig | None = None) -> Trip:
    """
    Recompute trips and return the one with this id.

    Raises:
        TripNotFoundError: If no trip has exactly this id
    """
    trip = find_trip(compute_trips(rows, settings), trip_id)
    if trip is None:
        raise TripNotFoundError(trip_id)
    return trip


def trip_spend_rows(rows: Sequence[Row], trip: Trip) -> list[Row]:
    """Spend (non-load) rows in the trip's country and date range."""
    members: list[Row] = []
    for row in rows:
        if is_load(row) or row_country(row) != trip.country:
            continue
        txn_date = row_date(row, TRAVEL_DATE_FIELDS)
        if txn_date is not None and trip.start <= txn_date <= trip.end:
            members.append(row)
    return members


def list_trips(
    rows: Sequence[Row], period: Period = ALL_TIME, settings: TravelConfig | None = None
) -> dict[str, Any]:
    """
    Trips within a period, newest first.

    Rows are filtered by period before segmentation, so a trip straddling
    the period boundary is cut at the boundary. A cut trip's id is built
    from its first in-period row and may not resolve in the per-trip
    reports, which always segment the full history. Use the all-time
    listing for ids to pass to them.
    """
    in_period = filter_by_period(rows, period, TRAVEL_DATE_FIELDS, UnparseablePolicy.EXCLUDE)
    trips = sorted(compute_trips(in_period, settings), key=lambda trip: trip.start, reverse=True)

    return {
        "period": period.label,
        "count": len(trips),
        "trips": [
            {
                "trip_id": trip.trip_id,
                "country": trip.country,
                "dates": f"{format_date(trip.start)} to {format_date(trip.end)}",
                "start_date": format_date(trip.start),
                "end_date": format_date(trip.end),
                "transaction_count": trip.transaction_count,
                "spend": round_money(trip.total_spend),
            }
            for trip in trips
        ],
    }


def trip_spend(rows: Sequence[Row], trip_id: str, settings: TravelConfig | None = None) -> dict[str, Any]:
    """Category breakdown of spending on one trip, largest first."""
    trip = get_trip(rows, trip_id, settings)

    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for row in trip_spend_rows(rows, trip):
        category = text_field(row, TRAVEL_CATEGORY_FIELDS, default="General")
        by_category[category] += amount_field(row, TRAVEL_AMOUNT_FIELDS)

    categories = sorted(by_category.items(), key=lambda item: item[1], reverse=True)
    return {
        "trip": {
            **trip.to_dict(),
            "duration_days": trip.duration_days,
        },
        "categories": [{"name": name, "amount": round_money(amount)} for name, amount in categories],
    }


def load_vs_spend(rows: Sequence[Row], trip_id: str, settings: TravelConfig | None = None) -> dict[str, Any]:
    """
    Wallet loads around a trip compared with what was spent on it.

    Loads count from ``load_lookback_days`` before the trip starts until the
    trip ends, in any country (loads are usually made at home).
    """
    travel = _settings(settings)
    trip = get_trip(rows, trip_id, travel)
    window_start = trip.start - timedelta(days=travel.load_lookback_days)

    total_loaded = ZERO
    for row in rows:
        if not is_load(row):
            continue
        load_date = row_date(row, TRAVEL_DATE_FIELDS)
        if load_date is not None and window_start <= load_date <= trip.end:
            total_loaded += amount_field(row, TRAVEL_AMOUNT_FIELDS)

    total_spent = trip.total_spend
    utilization = int(round_money(total_spent / total_loaded * 100, places=0)) if total_loaded else 0

    return {
        "trip_id": trip.trip_id,
        "total_loaded": round_money(total_loaded),
        "total_spent": round_money(total_spent),
        "remaining": round_money(total_loaded - total_spent),
        "utilization_pct": utilization,
    }


def _trip_comparison_entry(trip: Trip) -> dict[str, Any]:
    return {
        "trip_id": trip.trip_id,
        "country": trip.country,
        "total_spend": round_money(trip.total_spend),
        "daily_avg": round_money(trip.total_spend / Decimal(str(trip.span_days))),
    }


def compare_trips(
    rows: Sequence[Row], trip_id_1: str, trip_id_2: str, settings: TravelConfig | None = None
) -> dict[str, Any]:
    """Side-by-side spend and daily average of two trips."""
    trips = compute_trips(rows, settings)
    first = find_trip(trips, trip_id_1)
    second = find_trip(trips, trip_id_2)
    if first is None:
        raise TripNotFoundError(trip_id_1)
    if second is None:
        raise TripNotFoundError(trip_id_2)

    return {
        "trip_1": _trip_comparison_entry(first),
        "trip_2": _trip_comparison_entry(second),
        "difference_spend": round_money(first.total_spend - second.total_spend),
    }


def currency_mix(rows: Sequence[Row], trip_id: str, settings: TravelConfig | None = None) -> dict[str, Any]:
    """Spend per transaction currency (in that currency) for one trip."""
    trip = get_trip(rows, trip_id, settings)

    by_currency: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for row in trip_spend_rows(rows, trip):
        currency = text_field(row, ("txn_curr",), default="BHD").upper()
        by_currency[currency] += amount_field(row, FOREIGN_AMOUNT_FIELDS)

    return {
        "trip_id": trip.trip_id,
        "currencies": [{"code": code, "amount": round_money(amount)} for code, amount in by_currency.items()],
    }
