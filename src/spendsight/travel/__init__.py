"""
Travel Package

Trip reconstruction from travel-wallet transactions and the reports built
on it (trip listings, per-trip spend, load vs spend, comparison, currency mix).
"""

from .models import Trip, TripNotFoundError, make_trip_id
from .trips import find_trip, segment_trips

__all__ = [
    "Trip",
    "TripNotFoundError",
    "find_trip",
    "make_trip_id",
    "segment_trips",
]
