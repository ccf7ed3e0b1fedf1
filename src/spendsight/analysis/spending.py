#!/usr/bin/env python3
"""
Spending Analysis

Aggregations over card/account transactions for a resolved period: totals,
category and merchant breakdowns, free-text search, a daily timeline and
outlier detection.
"""

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from ..core.currency import ZERO, round_money
from ..core.dates import format_date
from ..core.periods import ALL_TIME, Period
from ..core.records import (
    CATEGORY_FIELDS,
    MERCHANT_FIELDS,
    TRAVEL_DATE_FIELDS,
    TXN_DATE_FIELDS,
    Row,
    UnparseablePolicy,
    filter_by_period,
    is_credit,
    is_debit,
    is_load,
    row_date,
    text_field,
    txn_amount,
)

UNUSUAL_STD_DEVIATIONS = 2
UNUSUAL_LIMIT = 10


def spend_rows(rows: Sequence[Row], period: Period) -> list[Row]:
    """Debit rows with a positive amount inside the period."""
    spending = [row for row in rows if is_debit(row) and txn_amount(row) > ZERO]
    return filter_by_period(spending, period, TXN_DATE_FIELDS)


def _group_totals(rows: Sequence[Row], key_fields: Sequence[str], default: str) -> list[tuple[str, Decimal, int]]:
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)
    for row in rows:
        key = text_field(row, key_fields, default=default)
        totals[key] += txn_amount(row)
        counts[key] += 1
    grouped = [(key, totals[key], counts[key]) for key in totals]
    return sorted(grouped, key=lambda item: item[1], reverse=True)


def spend_summary(
    transactions: Sequence[Row], travel_rows: Sequence[Row], period: Period = ALL_TIME
) -> dict[str, Any]:
    """
    Total spent and received in a period.

    Spending combines account debits with travel-card spends (loads are
    moves of the customer's own money, not spending). Income is account
    credits only.
    """
    main_spend = spend_rows(transactions, period)
    travel_spend = filter_by_period(
        [row for row in travel_rows if not is_load(row) and txn_amount(row) > ZERO],
        period,
        TRAVEL_DATE_FIELDS,
    )
    income = filter_by_period([row for row in transactions if is_credit(row)], period, TXN_DATE_FIELDS)

    total_spent = sum((txn_amount(row) for row in main_spend + travel_spend), ZERO)
    total_income = sum((txn_amount(row) for row in income), ZERO)

    return {
        "period": period.label,
        "summary": {
            "total_spent": round_money(total_spent),
            "total_income": round_money(total_income),
            "net": round_money(total_income - total_spent),
            "transaction_count": len(main_spend) + len(travel_spend),
        },
    }


def spend_by_category(transactions: Sequence[Row], period: Period = ALL_TIME) -> dict[str, Any]:
    """Spending per merchant category, largest first."""
    grouped = _group_totals(spend_rows(transactions, period), CATEGORY_FIELDS, "Other")
    return {
        "period": period.label,
        "categories": [
            {"category": name, "total_spent": round_money(total), "transaction_count": count}
            for name, total, count in grouped
        ],
    }


def top_merchants(transactions: Sequence[Row], period: Period = ALL_TIME, limit: int = 10) -> dict[str, Any]:
    """The merchants with the highest total spend."""
    grouped = _group_totals(spend_rows(transactions, period), MERCHANT_FIELDS, "Unknown")
    return {
        "period": period.label,
        "merchants": [
            {"merchant": name, "total_spent": round_money(total), "transaction_count": count}
            for name, total, count in grouped[:limit]
        ],
    }


def search_transactions(
    transactions: Sequence[Row],
    query: str,
    period: Period = ALL_TIME,
    limit: int = 5,
    offset: int = 0,
) -> dict[str, Any]:
    """
    Case-insensitive substring search over merchant, counterparty,
    description and category.

    Rows with an unreadable date are kept when a period is given: a search
    is looking for a specific transaction and should not lose it to a bad
    date cell.
    """
    needle = query.lower()
    search_fields = ("merchant_name", "other_party_name", "description", "mcc_category")
    matches = [
        row
        for row in transactions
        if any(needle in str(row.get(field) or "").lower() for field in search_fields)
    ]
    matches = filter_by_period(matches, period, TXN_DATE_FIELDS, UnparseablePolicy.INCLUDE)
    page = matches[offset : offset + limit]

    return {
        "query": query,
        "period": period.label,
        "total_matches": len(matches),
        "showing": len(page),
        "offset": offset,
        "results": [
            {
                "date": row.get("transaction_date_time"),
                "amount": round_money(txn_amount(row)),
                "merchant": text_field(row, ("merchant_name", "other_party_name")) or None,
                "category": row.get("mcc_category"),
                "type": row.get("credit_debit"),
            }
            for row in page
        ],
    }


def daily_spend(transactions: Sequence[Row], period: Period) -> dict[str, Any]:
    """Spending per calendar day, oldest first."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)
    for row in spend_rows(transactions, period):
        day = format_date(row_date(row, TXN_DATE_FIELDS))
        if day is None:
            continue
        totals[day] += txn_amount(row)
        counts[day] += 1

    return {
        "period": period.label,
        "daily": [
            {"date": day, "total_spent": round_money(totals[day]), "transaction_count": counts[day]}
            for day in sorted(totals)
        ],
    }


def unusual_spend(transactions: Sequence[Row], period: Period = ALL_TIME) -> dict[str, Any]:
    """
    Transactions more than two standard deviations above the mean amount.

    Uses the population standard deviation over the period's spending.
    """
    spending = spend_rows(transactions, period)
    amounts = np.array([float(txn_amount(row)) for row in spending], dtype=float)

    if amounts.size:
        average = float(amounts.mean())
        threshold = average + UNUSUAL_STD_DEVIATIONS * float(amounts.std())
    else:
        average = 0.0
        threshold = 0.0

    unusual = sorted(
        (row for row in spending if float(txn_amount(row)) > threshold),
        key=txn_amount,
        reverse=True,
    )

    return {
        "period": period.label,
        "average_spend": round_money(average),
        "threshold": round_money(threshold),
        "unusual_count": len(unusual),
        "unusual_transactions": [
            {
                "date": row.get("transaction_date_time"),
                "amount": round_money(txn_amount(row)),
                "merchant": text_field(row, ("merchant_name", "other_party_name")) or None,
                "category": row.get("mcc_category"),
                "reason": "Amount significantly above average",
            }
            for row in unusual[:UNUSUAL_LIMIT]
        ],
    }
