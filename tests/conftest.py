"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

from datetime import datetime
from pathlib import Path

import pytest

from spendsight.cache import MemoryCache, TieredCache
from spendsight.core import config as config_module
from spendsight.core.config import Config
from spendsight.data.service import DataService
from tests.fixtures.workbook_rows import (
    REMITTANCE_ROWS,
    TRANSACTION_ROWS,
    TRAVEL_ROWS,
    FakeWorkbookSource,
    default_workbooks,
    rewards_by_key,
)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real workbooks
    monkeypatch.setenv("SPENDSIGHT_ENV", "test")
    monkeypatch.setenv("SPENDSIGHT_DATA_DIR", str(tmp_path / "data"))

    for name in ("WORKBOOK_PASSWORD", "HOME_COUNTRY", "TRIP_GAP_DAYS", "CACHE_ENABLED", "PORT"):
        monkeypatch.delenv(name, raising=False)

    # Force the global configuration to be rebuilt from this environment
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def test_config() -> Config:
    """Configuration for the test environment."""
    return Config.from_environment()


@pytest.fixture
def fixed_now() -> datetime:
    """Reference 'now' for period resolution: Friday 2024-11-15 14:30."""
    return datetime(2024, 11, 15, 14, 30)


@pytest.fixture
def travel_rows() -> list[dict]:
    return [dict(row) for row in TRAVEL_ROWS]


@pytest.fixture
def transaction_rows() -> list[dict]:
    return [dict(row) for row in TRANSACTION_ROWS]


@pytest.fixture
def remittance_rows() -> list[dict]:
    return [dict(row) for row in REMITTANCE_ROWS]


@pytest.fixture
def rewards_sheets() -> dict[str, list[dict]]:
    return rewards_by_key()


@pytest.fixture
def workbook_source() -> FakeWorkbookSource:
    """In-memory stand-in for the Excel workbooks."""
    return FakeWorkbookSource(default_workbooks())


@pytest.fixture
def data_service(test_config, workbook_source) -> DataService:
    """Dataset service over the synthetic workbooks with a memory-only cache."""
    return DataService(
        test_config,
        TieredCache(MemoryCache()),
        row_reader=workbook_source.read_rows,
        sheet_lister=workbook_source.list_sheets,
    )


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Scratch directory for test files."""
    return tmp_path


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "periods: Tests for period token resolution")
    config.addinivalue_line("markers", "travel: Tests for trip segmentation and travel reports")
    config.addinivalue_line("markers", "cache: Tests for the caching layers")
