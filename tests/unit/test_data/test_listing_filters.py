#!/usr/bin/env python3
"""Tests for listing field filters and per-sheet amount statistics."""

import pytest

from spendsight.cache import NullCache
from spendsight.core.periods import ALL_TIME, resolve_period
from spendsight.data.filters import (
    amount_stats,
    apply_filters,
    filter_names,
    select_filters,
    stat_fields_for,
)
from spendsight.data.service import DataService, Dataset
from tests.fixtures.workbook_rows import TRAVEL_ROWS, FakeWorkbookSource, default_workbooks

TRANSFERS = [
    {
        "timestamp_created": "2024-01-15",
        "total_amount_in_BHD": 100,
        "cpr": 880101234.0,
        "paymentmode": "Bank Transfer",
        "status": True,
    },
    {
        "timestamp_created": "2024-01-20",
        "total_amount_in_BHD": 25,
        "cpr": "770505111",
        "paymentmode": "Cash Pickup",
        "status": "False",
    },
    {
        "timestamp_created": "2024-01-25",
        "total_amount_in_BHD": 40,
        "cpr": "880101234",
        "paymentmode": "BANK TRANSFER",
        "status": None,
    },
]


@pytest.fixture
def transfer_service(test_config):
    workbooks = default_workbooks()
    workbooks["Remittance.xlsx"] = {"Transfers": TRANSFERS}
    source = FakeWorkbookSource(workbooks)
    return DataService(test_config, NullCache(), source.read_rows, source.list_sheets)


class TestFilterNames:
    """Test which filters each dataset accepts."""

    @pytest.mark.parametrize(
        "dataset,names",
        [
            (Dataset.REMITTANCE, ["cpr", "paymentmode", "status"]),
            (Dataset.TRANSACTIONS, ["sender_cr", "transaction_type", "transaction_status", "credit_debit"]),
            (Dataset.REWARDS, ["customerId"]),
            (Dataset.TRAVELBUDDY, ["customerId", "country", "transactionType"]),
        ],
        ids=["remittance", "transactions", "rewards", "travelbuddy"],
    )
    def test_filter_names(self, dataset, names):
        assert filter_names(dataset) == names

    def test_select_ignores_unrelated_and_blank_values(self):
        params = {"country": "India", "transactionType": "  ", "month": "3", "cpr": "123"}
        assert select_filters(Dataset.TRAVELBUDDY, params) == {"country": "India"}


class TestMatchModes:
    """Test the comparison used by each filter."""

    def test_exact_ignores_float_suffix(self):
        matched = apply_filters(Dataset.REMITTANCE, "transfers", TRANSFERS, {"cpr": "880101234"})
        assert [row["total_amount_in_BHD"] for row in matched] == [100, 40]

    def test_contains_is_case_insensitive(self):
        matched = apply_filters(Dataset.REMITTANCE, "transfers", TRANSFERS, {"paymentmode": "transfer"})
        assert len(matched) == 2

    @pytest.mark.parametrize("wanted,amounts", [("true", [100]), ("FALSE", [25])], ids=["true", "false"])
    def test_boolean_skips_missing_flags(self, wanted, amounts):
        matched = apply_filters(Dataset.REMITTANCE, "transfers", TRANSFERS, {"status": wanted})
        assert [row["total_amount_in_BHD"] for row in matched] == amounts

    def test_iequals(self):
        matched = apply_filters(Dataset.TRAVELBUDDY, "transactions", TRAVEL_ROWS, {"transactionType": "load"})
        assert [row["Amount"] for row in matched] == [200, 30]

    def test_filters_combine(self):
        matched = apply_filters(
            Dataset.TRAVELBUDDY, "transactions", TRAVEL_ROWS, {"transactionType": "LOAD", "country": "ind"}
        )
        assert [row["Amount"] for row in matched] == [30]

    def test_country_only_applies_to_transaction_sheets(self):
        matched = apply_filters(Dataset.TRAVELBUDDY, "summary", TRAVEL_ROWS, {"country": "Thailand"})
        assert len(matched) == len(TRAVEL_ROWS)

    def test_no_filters_keeps_everything(self):
        assert apply_filters(Dataset.TRAVELBUDDY, "transactions", TRAVEL_ROWS, {}) == TRAVEL_ROWS


class TestAmountStats:
    """Test per-sheet amount statistics."""

    def test_stats(self):
        rows = [{"Amount": 200}, {"Amount": "BHD 30.000"}, {"Message": "no amount"}]

        assert amount_stats(rows, ("Amount",)) == {
            "count": 2,
            "total": 230.0,
            "average": 115.0,
            "min": 30.0,
            "max": 200.0,
        }

    def test_empty(self):
        assert amount_stats([], ("Amount",)) == {"count": 0, "total": 0.0, "average": 0.0, "min": 0.0, "max": 0.0}

    def test_points_sheets_use_points(self):
        assert stat_fields_for(Dataset.REWARDS, "flyy_points") == ("Points",)
        assert "BHD_Amount" in stat_fields_for(Dataset.REWARDS, "transactions")


class TestFilteredListing:
    """Test filters and summaries on service listings."""

    def test_travel_loads_with_summary(self, data_service):
        listing = data_service.listing(Dataset.TRAVELBUDDY, ALL_TIME, filters={"transactionType": "LOAD"})

        assert listing["filters"] == {"transactionType": "LOAD"}
        assert listing["total_records"] == 2
        assert all(row["transactionType_dsc"] == "LOAD" for row in listing["data"]["transactions"])
        assert listing["summary"]["transactions"]["total"] == 230.0

    def test_credit_debit(self, data_service):
        listing = data_service.listing("transactions", ALL_TIME, filters={"credit_debit": "credit"})

        assert listing["total_records"] == 1
        assert listing["summary"]["account"] == {
            "count": 1,
            "total": 500.0,
            "average": 500.0,
            "min": 500.0,
            "max": 500.0,
        }

    def test_summary_per_sheet(self, data_service):
        summary = data_service.listing("rewards", ALL_TIME)["summary"]

        assert summary["flyy_points"]["total"] == 6500.0
        assert summary["load"]["total"] == 100.0
        assert summary["transactions"]["count"] == 2

    def test_remittance_filters(self, transfer_service):
        listing = transfer_service.listing("remittance", ALL_TIME, filters={"cpr": "880101234", "status": "true"})

        assert listing["total_records"] == 1
        assert listing["summary"]["transfers"]["total"] == 100.0

    def test_filters_apply_after_period(self, data_service):
        period = resolve_period("october_2024")
        listing = data_service.listing("transactions", period, filters={"credit_debit": "debit"})
        assert listing["total_records"] == 1


class TestAllDatasets:
    """Test the combined all-time view."""

    def test_every_dataset_keyed_by_sheet(self, data_service):
        combined = data_service.all_datasets()

        assert list(combined) == ["remittance", "transactions", "rewards", "travelbuddy"]
        assert list(combined["rewards"]) == ["transactions", "load", "flyy_points"]
        assert len(combined["travelbuddy"]["transactions"]) == len(TRAVEL_ROWS)
        assert len(combined["remittance"]["transfers"]) == 6
