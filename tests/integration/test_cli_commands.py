#!/usr/bin/env python3
"""
Integration tests for the spendsight CLI

Runs real command invocations against the synthetic workbooks through an
injected dataset service.
"""

import json

import pytest
from click.testing import CliRunner

from spendsight.cli.main import main


@pytest.fixture
def run(data_service):
    """Invoke the CLI with the synthetic dataset service."""
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(main, list(args), obj={"service": data_service})

    return invoke


def as_json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


@pytest.mark.integration
class TestMainCommands:
    """Test the top-level commands."""

    def test_help_lists_command_groups(self):
        result = CliRunner().invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Spendsight" in result.output
        for command in ["data", "cache", "spend", "travel", "remittance", "rewards", "serve"]:
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["version"])

        assert result.exit_code == 0
        assert "Spendsight v" in result.output
        assert "Author:" in result.output

    def test_config_redacts_password(self, monkeypatch):
        monkeypatch.setenv("WORKBOOK_PASSWORD", "hunter2")

        result = CliRunner().invoke(main, ["config"])

        assert result.exit_code == 0
        assert "Current Configuration:" in result.output
        assert "Data Directory:" in result.output
        assert "hunter2" not in result.output
        assert "***REDACTED***" in result.output

    def test_verbose_reports_environment(self):
        result = CliRunner().invoke(main, ["--verbose", "version"])

        assert result.exit_code == 0
        assert "Environment: test" in result.output

    def test_period_resolution(self):
        result = CliRunner().invoke(main, ["period", "november_2024"])

        assert as_json(result) == {
            "label": "November 2024",
            "kind": "calendar_month",
            "start": "2024-11-01T00:00:00",
            "end": "2024-11-30T23:59:59.999000",
        }

    def test_invalid_command(self):
        result = CliRunner().invoke(main, ["invalid-command"])
        assert result.exit_code != 0


@pytest.mark.integration
class TestSpendCommands:
    """Test spend reports."""

    def test_summary(self, run):
        result = as_json(run("spend", "summary", "--period", "november_2024"))

        assert result["period"] == "November 2024"
        assert result["summary"]["total_spent"] == 360.0
        assert result["summary"]["total_income"] == 500.0

    def test_search_with_paging(self, run):
        result = as_json(run("spend", "search", "cafe", "--limit", "2"))

        assert result["total_matches"] == 3
        assert result["showing"] == 2

    def test_merchants_limit(self, run):
        result = as_json(run("spend", "merchants", "-p", "november_2024", "--limit", "1"))
        assert [m["merchant"] for m in result["merchants"]] == ["Gadget Store"]


@pytest.mark.integration
class TestTravelCommands:
    """Test travel reports."""

    def test_trips_newest_first(self, run):
        result = as_json(run("travel", "trips"))

        assert result["count"] == 3
        assert [t["trip_id"] for t in result["trips"]] == [
            "Thailand_202403_25",
            "India_202403_24",
            "India_202403_5",
        ]

    def test_trip_breakdown(self, run):
        result = as_json(run("travel", "trip", "India_202403_5"))
        assert result["categories"] == [{"name": "Dining", "amount": 10.0}, {"name": "Groceries", "amount": 5.0}]

    def test_load_vs_spend(self, run):
        result = as_json(run("travel", "load-vs-spend", "India_202403_5"))

        assert result["total_loaded"] == 230.0
        assert result["total_spent"] == 15.0
        assert result["remaining"] == 215.0
        assert result["utilization_pct"] == 7

    def test_compare(self, run):
        result = as_json(run("travel", "compare", "India_202403_5", "Thailand_202403_25"))
        assert result["difference_spend"] == -5.0

    def test_currency_mix(self, run):
        result = as_json(run("travel", "currency-mix", "Thailand_202403_25"))
        assert result["currencies"] == [{"code": "THB", "amount": 1900.0}]

    def test_unknown_trip_is_an_error(self, run):
        result = run("travel", "trip", "Atlantis_202401_1")

        assert result.exit_code == 1
        assert "Trip not found: Atlantis_202401_1" in result.output


@pytest.mark.integration
class TestRemittanceAndRewardsCommands:
    """Test remittance and rewards reports."""

    def test_remittance_summary(self, run):
        result = as_json(run("remittance", "summary", "--year", "2024", "--month", "2"))
        assert result["total_remitted"] == 230.0

    def test_remittance_month_out_of_range(self, run):
        result = run("remittance", "summary", "--month", "13")
        assert result.exit_code == 2

    @pytest.mark.parametrize(
        "args",
        [("summary", "--year", "10000"), ("trend", "--years", "1000"), ("trend", "--years", "0")],
        ids=["summary_year", "trend_years", "trend_zero_years"],
    )
    def test_remittance_years_out_of_range(self, run, args):
        result = run("remittance", *args)

        assert result.exit_code == 2
        assert "Traceback" not in result.output

    def test_recipient(self, run):
        assert as_json(run("remittance", "recipient", "maria"))["transaction_count"] == 2

    def test_fx_rate(self, run):
        assert as_json(run("remittance", "fx-rate", "INR"))["rate"] == 22.15

    def test_rewards_summary(self, run):
        result = as_json(run("rewards", "summary"))

        assert result["tier"] == "Gold"
        assert result["summary"]["total_points"] == 6500

    def test_rewards_activity_by_type(self, run):
        result = as_json(run("rewards", "activity", "--type", "load"))
        assert [a["type"] for a in result["activity"]] == ["Load"]

    def test_strategy(self, run):
        assert as_json(run("rewards", "strategy"))["category"] == "General"


@pytest.mark.integration
class TestDataCommands:
    """Test raw dataset and cache commands."""

    def test_list_month(self, run):
        result = as_json(run("data", "list", "transactions", "--month", "11", "--year", "2024"))

        assert result["filter_period"] == "November 2024"
        assert result["total_records"] == 5

    def test_list_all_one_sheet(self, run):
        result = as_json(run("data", "list", "rewards", "--all", "--sheet", "load"))

        assert result["sheets"] == ["load"]
        assert result["total_records"] == 1

    def test_list_unknown_dataset(self, run):
        result = run("data", "list", "payroll")
        assert result.exit_code == 2

    def test_list_with_filters(self, run):
        result = as_json(
            run("data", "list", "travelbuddy", "--all", "--filter", "transactionType=load", "-f", "country=india")
        )

        assert result["filters"] == {"transactionType": "load", "country": "india"}
        assert result["total_records"] == 1
        assert result["summary"]["transactions"]["total"] == 30.0

    @pytest.mark.parametrize(
        "pair,message",
        [("cpr=123", "unknown filter 'cpr'"), ("transactionType", "expected NAME=VALUE"), ("country=", "NAME=VALUE")],
        ids=["other_dataset_filter", "missing_value", "blank_value"],
    )
    def test_list_rejects_bad_filters(self, run, pair, message):
        result = run("data", "list", "travelbuddy", "--all", "--filter", pair)

        assert result.exit_code == 2
        assert message in result.output

    def test_list_year_out_of_range(self, run):
        assert run("data", "list", "transactions", "--year", "10000").exit_code == 2

    def test_all(self, run):
        result = as_json(run("data", "all"))

        assert list(result) == ["remittance", "transactions", "rewards", "travelbuddy"]
        assert len(result["travelbuddy"]["transactions"]) == 8

    def test_sheets(self, run):
        result = as_json(run("data", "sheets"))
        assert result["rewards"] == {"file": "Rewards History.xlsx", "sheets": ["Transactions", "Load", "Flyy points"]}

    def test_cache_clear_forces_reload(self, run, workbook_source):
        run("spend", "summary")
        reads = workbook_source.read_count

        result = run("cache", "clear")
        run("spend", "summary")

        assert result.exit_code == 0
        assert "Cache cleared" in result.output
        assert workbook_source.read_count > reads
