#!/usr/bin/env python3
"""
Rewards Analysis

Points, cashback and wallet-load summaries over the rewards workbook. The
workbook has one sheet per activity kind; sheets are addressed by their
normalized key (``transactions``, ``load``, ``flyy_points``).
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from ..core.currency import ZERO, parse_amount, round_money
from ..core.dates import format_datetime
from ..core.periods import ALL_TIME, Period
from ..core.records import (
    POINTS_DATE_FIELDS,
    REWARDS_AMOUNT_FIELDS,
    REWARDS_DATE_FIELDS,
    Row,
    amount_field,
    filter_by_period,
    row_date,
    text_field,
)

ACTIVITY_LIMIT = 50

# Ascending (tier, points strictly above which it applies)
TIERS = (("Silver", 0), ("Gold", 5000), ("Platinum", 10000))

TYPE_ALIASES = {
    "transactions": "transactions",
    "load": "load",
    "flyy_points": "flyy_points",
    "flyypoints": "flyy_points",
}

STRATEGY_RULES = {
    "dining": "Use your Platinum Card for 5x points on dining.",
    "grocery": "Use Gold Card for 3% cashback at supermarkets.",
    "travel": "Book via the portal for 10x points on hotels.",
    "fuel": "Use Debit Card for 2% instant cashback.",
}
DEFAULT_STRATEGY = "Use your Platinum Card for 1.5x points on general spend."


def _is_points_sheet(key: str) -> bool:
    return "flyy" in key or "points" in key


def _date_fields(key: str) -> Sequence[str]:
    return POINTS_DATE_FIELDS if _is_points_sheet(key) else REWARDS_DATE_FIELDS


def select_sheets(sheets: Mapping[str, Sequence[Row]], reward_type: str | None) -> dict[str, Sequence[Row]]:
    """
    Sheets to aggregate for a reward type.

    ``None``, ``"all"`` and unrecognized types select every sheet, as does a
    known type whose sheet is missing from the workbook.
    """
    if reward_type and reward_type.lower() != "all":
        target = TYPE_ALIASES.get(reward_type.lower())
        if target in sheets:
            return {target: sheets[target]}
    return dict(sheets)


def tier_for(points: Decimal | float) -> str:
    """Loyalty tier for a points balance."""
    current = TIERS[0][0]
    for name, above in TIERS:
        if points > above:
            current = name
    return current


def next_tier_progress(points: Decimal | float) -> int:
    """
    Percentage of the way to the next tier's threshold.

    Platinum has no next tier and reports 100.
    """
    for _name, above in TIERS[1:]:
        if points <= above:
            return int(round_money(Decimal(str(points)) / above * 100, places=0))
    return 100


def rewards_summary(
    sheets: Mapping[str, Sequence[Row]], reward_type: str | None = None, period: Period = ALL_TIME
) -> dict[str, Any]:
    """Points, cashback and load totals for a period."""
    total_points = ZERO
    total_transactions = ZERO
    total_load = ZERO
    record_count = 0

    for key, rows in select_sheets(sheets, reward_type).items():
        in_period = filter_by_period(rows, period, _date_fields(key))
        record_count += len(in_period)
        for row in in_period:
            if _is_points_sheet(key):
                total_points += parse_amount(row.get("Points"))
            elif "load" in key:
                total_load += amount_field(row, REWARDS_AMOUNT_FIELDS)
            elif "transaction" in key:
                total_transactions += amount_field(row, REWARDS_AMOUNT_FIELDS)

    kind = (reward_type or "all").lower()
    result: dict[str, Any] = {"type": reward_type or "all", "period": period.label, "record_count": record_count}

    if kind in ("flyy_points", "flyypoints"):
        result["summary"] = {
            "total_points": int(round_money(total_points, places=0)),
            "tier": tier_for(total_points),
            "next_tier_progress": next_tier_progress(total_points),
        }
    elif kind == "load":
        result["summary"] = {"total_load_bhd": round_money(total_load), "transaction_count": record_count}
    elif kind == "transactions":
        result["summary"] = {
            "total_transactions_bhd": round_money(total_transactions),
            "total_cashback_bhd": round_money(total_transactions),
            "transaction_count": record_count,
        }
    else:
        result["summary"] = {
            "total_points": int(round_money(total_points, places=0)),
            "total_cashback_bhd": round_money(total_transactions),
            "total_load_bhd": round_money(total_load),
            "total_transactions_bhd": round_money(total_transactions),
        }
        result["tier"] = tier_for(total_points)
        result["next_tier_progress"] = next_tier_progress(total_points)

    return result


def _activity_entry(key: str, row: Row, when: datetime) -> dict[str, Any]:
    if _is_points_sheet(key):
        kind = "Points"
        amount = parse_amount(row.get("Points"))
        description = text_field(row, ("Message", "Description"), default="Points Activity")
    elif "load" in key:
        kind = "Load"
        amount = amount_field(row, REWARDS_AMOUNT_FIELDS)
        description = text_field(row, ("description", "transactionType_dsc"), default="Wallet Load")
    else:
        kind = "Transaction"
        amount = amount_field(row, REWARDS_AMOUNT_FIELDS)
        description = text_field(
            row, ("otherPartyName", "MCC_Name", "transactionType_dsc"), default="Card Transaction"
        )

    return {
        "date": format_datetime(when),
        "sheet_type": key,
        "type": kind,
        "description": description,
        "amount": round_money(amount),
        "currency": "Points" if _is_points_sheet(key) else "BHD",
    }


def rewards_activity(
    sheets: Mapping[str, Sequence[Row]], reward_type: str | None = None, period: Period = ALL_TIME
) -> dict[str, Any]:
    """Reward events newest first, capped at ACTIVITY_LIMIT. Undated rows are left out."""
    dated: list[tuple[datetime, dict[str, Any]]] = []
    for key, rows in select_sheets(sheets, reward_type).items():
        for row in filter_by_period(rows, period, _date_fields(key)):
            when = row_date(row, _date_fields(key))
            if when is not None:
                dated.append((when, _activity_entry(key, row, when)))

    dated.sort(key=lambda item: item[0], reverse=True)
    return {
        "type": reward_type or "all",
        "period": period.label,
        "count": len(dated),
        "activity": [entry for _when, entry in dated[:ACTIVITY_LIMIT]],
    }


def best_strategy(category: str | None = None) -> dict[str, Any]:
    """Static recommendation for earning the most on a spend category."""
    recommendation = STRATEGY_RULES.get((category or "").strip().lower(), DEFAULT_STRATEGY)
    return {"category": category or "General", "recommendation": recommendation}
