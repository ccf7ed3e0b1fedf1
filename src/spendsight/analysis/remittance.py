#!/usr/bin/env python3
"""
Remittance Analysis

Summaries over outbound money transfers: yearly/monthly totals, per-recipient
statistics, multi-year trend, search, and the static BHD exchange-rate table.

Transfers whose ``status`` is false (failed or cancelled) are left out of
every total.
"""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from ..core.currency import ZERO, round_money
from ..core.dates import format_date
from ..core.periods import calendar_month_period, calendar_year_period
from ..core.records import REMITTANCE_AMOUNT_FIELDS, REMITTANCE_DATE_FIELDS, Row, amount_field, row_date

BASE_CURRENCY = "BHD"
MAX_TREND_YEARS = 100

# Static indicative rates: 1 BHD = rate units of the target currency
FX_RATES = {
    "INR": 22.15,
    "PHP": 14.85,
    "USD": 0.376,
    "EUR": 0.345,
    "GBP": 0.297,
    "PKR": 74.5,
    "BDT": 28.4,
    "NPR": 35.4,
}


def is_failed(row: Row) -> bool:
    """True when the transfer's status marks it as not completed."""
    status = row.get("status")
    if status is False:
        return True
    return isinstance(status, str) and status.strip().lower() == "false"


def remittance_amount(row: Row):
    """BHD amount of a transfer."""
    return amount_field(row, REMITTANCE_AMOUNT_FIELDS)


def remittance_summary(
    rows: Sequence[Row], year: int | None = None, month: int | None = None, today: date | None = None
) -> dict[str, Any]:
    """Total and average remitted in a year, or in one month of it."""
    target_year = year or (today or date.today()).year
    period = calendar_month_period(target_year, month) if month else calendar_year_period(target_year)

    selected = []
    for row in rows:
        sent = row_date(row, REMITTANCE_DATE_FIELDS)
        if sent is None or is_failed(row):
            continue
        if period.contains(sent):
            selected.append(row)

    total = sum((remittance_amount(row) for row in selected), ZERO)
    return {
        "period": period.label,
        "year": target_year,
        "month": month or None,
        "total_remitted": round_money(total),
        "count": len(selected),
        "average_amount": round_money(total / len(selected)) if selected else 0,
    }


def recipient_stats(rows: Sequence[Row], recipient_name: str) -> dict[str, Any]:
    """Totals for beneficiaries whose name contains the given text."""
    needle = recipient_name.lower()
    matches = [
        row
        for row in rows
        if needle in str(row.get("beneficiary_name") or "").lower() and not is_failed(row)
    ]

    sent_dates: list[datetime] = [d for d in (row_date(row, REMITTANCE_DATE_FIELDS) for row in matches) if d]
    total = sum((remittance_amount(row) for row in matches), ZERO)

    return {
        "recipient": recipient_name,
        "total_sent": round_money(total),
        "transaction_count": len(matches),
        "last_sent": format_date(max(sent_dates)) if sent_dates else None,
    }


def remittance_trend(rows: Sequence[Row], years: int = 3, today: date | None = None) -> dict[str, Any]:
    """Yearly totals for the last N years, oldest first."""
    current_year = (today or date.today()).year
    trend = []
    for year in range(current_year - years + 1, current_year + 1):
        yearly = [
            row
            for row in rows
            if not is_failed(row) and (sent := row_date(row, REMITTANCE_DATE_FIELDS)) and sent.year == year
        ]
        trend.append(
            {
                "year": year,
                "total_remitted": round_money(sum((remittance_amount(row) for row in yearly), ZERO)),
                "count": len(yearly),
            }
        )
    return {"trend": trend}


def search_remittances(rows: Sequence[Row], query: str, limit: int = 5, offset: int = 0) -> dict[str, Any]:
    """Substring search over purpose, beneficiary and biller."""
    needle = query.lower()
    search_fields = ("purpose_of_payment", "beneficiary_name", "biller_name")
    matches = [
        row for row in rows if any(needle in str(row.get(field) or "").lower() for field in search_fields)
    ]
    page = matches[offset : offset + limit]

    return {
        "query": query,
        "total_matches": len(matches),
        "showing": len(page),
        "offset": offset,
        "results": [
            {
                "date": row.get("timestamp_created"),
                "amount": round_money(remittance_amount(row)),
                "beneficiary": row.get("beneficiary_name") or row.get("biller_name"),
                "purpose": row.get("purpose_of_payment"),
                "status": row.get("status"),
            }
            for row in page
        ],
    }


def fx_rate(currency: str) -> dict[str, Any]:
    """Static BHD exchange rate for a currency code."""
    code = currency.strip().upper()
    rate = FX_RATES.get(code)
    return {
        "base_currency": BASE_CURRENCY,
        "target_currency": code,
        "rate": rate,
        "message": f"1 {BASE_CURRENCY} = {rate} {code}" if rate else "Currency not found",
    }
