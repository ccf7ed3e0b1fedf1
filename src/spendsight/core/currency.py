#!/usr/bin/env python3
"""
Currency Parsing and Rounding Utilities

Amounts in the source workbooks are Bahraini dinar (BHD) values stored as
numbers or as strings such as ``"BHD 1,250.500"``. Everything is parsed into
``Decimal`` so sums never pick up floating-point drift; rounding to a float
happens only at the edge, when a value is put into a JSON response.

Key Principles:
- Never accumulate floats; accumulate Decimal
- Unparseable amounts count as zero, they never raise
- Round half-up to 2 places for display
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
_CENT = Decimal("0.01")


def parse_amount(value: Any) -> Decimal:
    """
    Safely convert a workbook amount cell to Decimal.

    Args:
        value: Number, numeric string like 'BHD 1,250.500', or None

    Returns:
        Decimal amount, ZERO for invalid input

    Examples:
        parse_amount('BHD 12.345') -> Decimal('12.345')
        parse_amount('1,250') -> Decimal('1250')
        parse_amount('FREE') -> Decimal('0')
        parse_amount(None) -> Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO

    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, (int, float)):
            result = Decimal(str(value))
        else:
            clean_str = str(value).upper().replace("BHD", "").replace(",", "").strip()
            if not clean_str or clean_str.lower() in ["nan", "none", "free", "-"]:
                return ZERO
            result = Decimal(clean_str)
    except (ValueError, TypeError, InvalidOperation):
        return ZERO

    # NaN and infinity are not amounts
    if not result.is_finite():
        return ZERO
    return result


def round_money(value: Decimal | int | float, places: int = 2) -> float:
    """
    Round half-up for display and return a JSON-friendly float.

    Example:
        round_money(Decimal('12.345')) -> 12.35
    """
    quantum = _CENT if places == 2 else Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
