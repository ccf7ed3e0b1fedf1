#!/usr/bin/env python3
"""
Workbook Row Helpers

Rows come from workbooks whose headers are not consistent between sheets,
so every logical field (date, amount, category, ...) has an ordered list of
candidate column names. ``first_field`` resolves a field by taking the
first candidate holding a usable value.

Also provides the classification predicates (debit/credit/load), country
normalization, and period filtering used across all analytics.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .currency import ZERO, parse_amount
from .dates import parse_timestamp
from .periods import Period

Row = Mapping[str, Any]

UNKNOWN_COUNTRY = "Unknown"

# Candidate column names, in lookup order
TXN_DATE_FIELDS = ("transaction_date_time", "created_date")
TXN_AMOUNT_FIELDS = ("transaction_amount", "amount", "Amount", "BHD_Amount", "txn_amt", "bill_amt")
TRAVEL_DATE_FIELDS = ("Txn_Date", "txn_date")
TRAVEL_AMOUNT_FIELDS = ("Amount", "BHD_Amount", "amount", "txn_amt", "bill_amt")
FOREIGN_AMOUNT_FIELDS = ("txn_amt", "amount")
REMITTANCE_DATE_FIELDS = ("timestamp_created",)
REMITTANCE_AMOUNT_FIELDS = ("total_amount_in_BHD", "amount")
REWARDS_DATE_FIELDS = ("Txn_Date", "Created_At")
POINTS_DATE_FIELDS = ("Created_At", "Txn_Date")
REWARDS_AMOUNT_FIELDS = ("BHD_Amount", "Amount", "amount")
COUNTRY_FIELDS = ("Country", "country")
CATEGORY_FIELDS = ("mcc_category", "MCC_Category", "category")
TRAVEL_CATEGORY_FIELDS = ("MCC_Category", "mcc_description")
MERCHANT_FIELDS = ("merchant_name", "other_party_name", "description")


class UnparseablePolicy(Enum):
    """What a date-bounded filter does with rows whose date cannot be parsed."""

    EXCLUDE = "exclude"
    INCLUDE = "include"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def first_field(row: Row, candidates: Sequence[str], default: Any = None) -> Any:
    """
    Value of the first candidate column holding a non-blank value.

    Example:
        first_field({"Amount": None, "amount": 5}, ("Amount", "amount")) -> 5
    """
    for name in candidates:
        value = row.get(name)
        if not _is_blank(value):
            return value
    return default


def text_field(row: Row, candidates: Sequence[str], default: str = "") -> str:
    """First non-blank candidate as a stripped string."""
    value = first_field(row, candidates)
    return str(value).strip() if value is not None else default


def amount_field(row: Row, candidates: Sequence[str]) -> Decimal:
    """
    Absolute amount from the first candidate with a non-zero value.

    Zero values are skipped so a column that exists but holds 0 does not
    hide a populated fallback column.
    """
    for name in candidates:
        value = row.get(name)
        if _is_blank(value):
            continue
        amount = parse_amount(value)
        if amount != ZERO:
            return abs(amount)
    return ZERO


def row_date(row: Row, candidates: Sequence[str]) -> datetime | None:
    """Parsed date of the first candidate column that parses."""
    for name in candidates:
        parsed = parse_timestamp(row.get(name))
        if parsed is not None:
            return parsed
    return None


def txn_amount(row: Row) -> Decimal:
    """Absolute amount of a card/account transaction row."""
    return amount_field(row, TXN_AMOUNT_FIELDS)


def is_debit(row: Row) -> bool:
    """True for outgoing (debit) account transactions."""
    return str(row.get("credit_debit") or "").strip().lower() in ("debit", "dr", "d")


def is_credit(row: Row) -> bool:
    """True for incoming (credit) account transactions."""
    return str(row.get("credit_debit") or "").strip().lower() in ("credit", "cr", "c")


def is_load(row: Row) -> bool:
    """True for travel-wallet top-ups."""
    return str(row.get("transactionType_dsc") or "").strip().upper() == "LOAD"


def normalize_country(value: Any) -> str:
    """
    Normalize a country cell, mapping garbage to UNKNOWN_COUNTRY.

    Formula-error cells arrive either as ``{"_error": "#N/A"}`` objects or
    as '#N/A'-style strings; both count as unknown, as do blanks.
    """
    if not isinstance(value, str):
        return UNKNOWN_COUNTRY
    country = value.strip()
    if not country or country.startswith("#"):
        return UNKNOWN_COUNTRY
    return country


def row_country(row: Row) -> str:
    """Normalized country of a travel row."""
    for name in COUNTRY_FIELDS:
        if name in row and not _is_blank(row[name]):
            return normalize_country(row[name])
    return UNKNOWN_COUNTRY


def filter_by_period(
    rows: Iterable[Row],
    period: Period,
    date_fields: Sequence[str],
    policy: UnparseablePolicy = UnparseablePolicy.EXCLUDE,
) -> list[Row]:
    """
    Keep rows whose date falls inside the period.

    An unbounded period keeps every row, dated or not. For bounded periods
    rows without a parseable date are kept or dropped according to policy.
    Returns a new list; the input is not modified.
    """
    if period.is_unbounded:
        return list(rows)

    kept: list[Row] = []
    for row in rows:
        parsed = row_date(row, date_fields)
        if parsed is None:
            if policy == UnparseablePolicy.INCLUDE:
                kept.append(row)
            continue
        if period.contains(parsed):
            kept.append(row)
    return kept
