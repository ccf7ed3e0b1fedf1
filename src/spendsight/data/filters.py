#!/usr/bin/env python3
"""
Listing Filters and Sheet Statistics

Field filters accepted by raw dataset listings, and the amount statistics
reported per sheet alongside them.

Each dataset has its own set of named filters. A filter reads the first
populated candidate column of a row and compares it with the requested
value in one of four ways:

- EXACT: same text (numeric cells compare without a trailing ``.0``)
- CONTAINS: case-insensitive substring
- IEQUALS: case-insensitive equality
- BOOLEAN: the cell as a true/false flag against ``true``/``false``
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from ..core.currency import parse_amount, round_money
from ..core.records import COUNTRY_FIELDS, Row, first_field
from .datasets import Dataset


class MatchMode(Enum):
    """How a filter value is compared with a cell."""

    EXACT = "exact"
    CONTAINS = "contains"
    IEQUALS = "iequals"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FieldFilter:
    """
    A named listing filter.

    Attributes:
        name: Query parameter / CLI filter name
        fields: Candidate columns, in lookup order
        mode: Comparison used
        sheet_contains: Only applies to sheets whose key contains this text
    """

    name: str
    fields: tuple[str, ...]
    mode: MatchMode
    sheet_contains: str | None = None

    def applies_to(self, sheet: str) -> bool:
        return self.sheet_contains is None or self.sheet_contains in sheet

    def matches(self, row: Row, wanted: str) -> bool:
        value = first_field(row, self.fields)
        if value is None:
            return False
        if self.mode == MatchMode.BOOLEAN:
            flag = _as_flag(value)
            return flag is not None and flag == (wanted.strip().lower() == "true")
        text = _as_text(value)
        if self.mode == MatchMode.CONTAINS:
            return wanted.strip().lower() in text.lower()
        if self.mode == MatchMode.IEQUALS:
            return text.lower() == wanted.strip().lower()
        return text == wanted.strip()


LISTING_FILTERS: dict[Dataset, tuple[FieldFilter, ...]] = {
    Dataset.REMITTANCE: (
        FieldFilter("cpr", ("cpr",), MatchMode.EXACT),
        FieldFilter("paymentmode", ("paymentmode",), MatchMode.CONTAINS),
        FieldFilter("status", ("status",), MatchMode.BOOLEAN),
    ),
    Dataset.TRANSACTIONS: (
        FieldFilter("sender_cr", ("sender_cr",), MatchMode.EXACT),
        FieldFilter("transaction_type", ("transaction_type",), MatchMode.CONTAINS),
        FieldFilter("transaction_status", ("transaction_status",), MatchMode.IEQUALS),
        FieldFilter("credit_debit", ("credit_debit",), MatchMode.IEQUALS),
    ),
    Dataset.REWARDS: (FieldFilter("customerId", ("customerId",), MatchMode.EXACT),),
    Dataset.TRAVELBUDDY: (
        FieldFilter("customerId", ("customerId",), MatchMode.EXACT),
        FieldFilter("country", COUNTRY_FIELDS, MatchMode.CONTAINS, sheet_contains="transaction"),
        FieldFilter("transactionType", ("transactionType_dsc",), MatchMode.IEQUALS),
    ),
}

# Amount columns summarized per sheet
STAT_FIELDS: dict[Dataset, tuple[str, ...]] = {
    Dataset.REMITTANCE: ("total_amount_in_BHD", "amount"),
    Dataset.TRANSACTIONS: ("transaction_amount", "amount", "Amount"),
    Dataset.REWARDS: ("BHD_Amount", "Amount", "Txn_Amt", "amount"),
    Dataset.TRAVELBUDDY: ("BHD_Amount", "Txn_Amt", "Amount", "amount", "txn_amt"),
}
POINTS_STAT_FIELDS = ("Points",)


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _as_flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def filter_names(dataset: Dataset) -> list[str]:
    """Filter names accepted for a dataset."""
    return [f.name for f in LISTING_FILTERS[dataset]]


def select_filters(dataset: Dataset, params: Mapping[str, Any]) -> dict[str, str]:
    """
    The dataset's filters present with a non-blank value in params.

    Unrelated parameters are ignored.
    """
    selected: dict[str, str] = {}
    for name in filter_names(dataset):
        value = params.get(name)
        if value is not None and str(value).strip():
            selected[name] = str(value)
    return selected


def apply_filters(dataset: Dataset, sheet: str, rows: Sequence[Row], filters: Mapping[str, str]) -> list[Row]:
    """Rows of one sheet matching every applicable filter."""
    active = [
        (f, filters[f.name]) for f in LISTING_FILTERS[dataset] if f.name in filters and f.applies_to(sheet)
    ]
    return [row for row in rows if all(f.matches(row, wanted) for f, wanted in active)]


def stat_fields_for(dataset: Dataset, sheet: str) -> tuple[str, ...]:
    if dataset == Dataset.REWARDS and ("flyy" in sheet or "points" in sheet):
        return POINTS_STAT_FIELDS
    return STAT_FIELDS[dataset]


def amount_stats(rows: Sequence[Row], fields: Sequence[str]) -> dict[str, Any]:
    """
    Count, total, average, minimum and maximum of an amount column.

    Rows without a value in any candidate column are not counted.
    """
    amounts = np.array(
        [float(parse_amount(value)) for value in (first_field(row, fields) for row in rows) if value is not None],
        dtype=float,
    )
    if not amounts.size:
        return {"count": 0, "total": 0.0, "average": 0.0, "min": 0.0, "max": 0.0}
    return {
        "count": int(amounts.size),
        "total": round_money(float(amounts.sum())),
        "average": round_money(float(amounts.mean())),
        "min": round_money(float(amounts.min())),
        "max": round_money(float(amounts.max())),
    }
