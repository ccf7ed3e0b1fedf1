#!/usr/bin/env python3
"""Tests for core currency utilities."""

from decimal import Decimal

import pytest

from spendsight.core.currency import ZERO, parse_amount, round_money


class TestParseAmount:
    """Test workbook amount parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (12.5, Decimal("12.5")),
            (7, Decimal("7")),
            ("BHD 1,250.500", Decimal("1250.500")),
            ("bhd 3.25", Decimal("3.25")),
            ("-4.5", Decimal("-4.5")),
            (Decimal("2.125"), Decimal("2.125")),
        ],
        ids=["float", "int", "bhd_prefix_commas", "lowercase_prefix", "negative", "decimal"],
    )
    def test_valid_amounts(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "FREE", "-", "abc", True, float("nan"), float("inf"), "NaN", {"_error": "#N/A"}],
        ids=["none", "empty", "free", "dash", "text", "bool", "nan", "inf", "nan_text", "error_cell"],
    )
    def test_invalid_amounts_are_zero(self, raw):
        assert parse_amount(raw) == ZERO


class TestRoundMoney:
    """Test display rounding."""

    def test_rounds_half_up(self):
        assert round_money(Decimal("12.345")) == 12.35
        assert round_money(Decimal("2.675")) == 2.68

    def test_returns_float(self):
        assert isinstance(round_money(Decimal("1")), float)

    def test_whole_number_places(self):
        assert round_money(Decimal("6.5"), places=0) == 7.0
        assert round_money(6.52, places=0) == 7.0
