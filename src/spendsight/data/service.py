#!/usr/bin/env python3
"""
Dataset Service

Single access point for the four source workbooks. Each dataset is read
sheet by sheet through the row source and memoized in the cache, so the
analytics layers only ever see lists of dict rows.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from ..core.config import Config
from ..core.periods import Period
from ..core.records import Row, filter_by_period
from ..workbook.loader import WorkbookError, list_sheets, read_rows, sheet_key
from .datasets import Dataset, UnknownDatasetError, date_fields_for
from .filters import amount_stats, apply_filters, stat_fields_for

__all__ = ["DataService", "Dataset", "UnknownDatasetError", "date_fields_for"]

logger = logging.getLogger(__name__)

RowReader = Callable[[Path, str | None, str | None], list[dict[str, Any]]]
SheetLister = Callable[[Path, str | None], list[str]]


class DataService:
    """
    Cached access to workbook rows.

    Args:
        config: Application configuration (workbook paths and password)
        cache: Object with get_or_load/clear, typically a TieredCache
        row_reader: Reads one sheet into rows
        sheet_lister: Lists a workbook's sheets
    """

    def __init__(
        self,
        config: Config,
        cache: Any,
        row_reader: RowReader = read_rows,
        sheet_lister: SheetLister = list_sheets,
    ):
        self.config = config
        self.cache = cache
        self._read_rows = row_reader
        self._list_sheets = sheet_lister

    def workbook_path(self, dataset: Dataset) -> Path:
        workbooks = self.config.workbooks
        filenames = {
            Dataset.REMITTANCE: workbooks.remittance_file,
            Dataset.TRANSACTIONS: workbooks.transactions_file,
            Dataset.REWARDS: workbooks.rewards_file,
            Dataset.TRAVELBUDDY: workbooks.travelbuddy_file,
        }
        return workbooks.path_for(filenames[dataset])

    def sheet_names(self, dataset: Dataset) -> list[str]:
        """Sheet names of a dataset's workbook (not cached)."""
        return self._list_sheets(self.workbook_path(dataset), self.config.workbooks.password)

    def _load_sheets(self, dataset: Dataset) -> dict[str, list[dict[str, Any]]]:
        path = self.workbook_path(dataset)
        password = self.config.workbooks.password
        loaded: dict[str, list[dict[str, Any]]] = {}
        for name in self._list_sheets(path, password):
            rows = self._read_rows(path, name, password)
            for row in rows:
                row["_sheet"] = name
            loaded[sheet_key(name)] = rows
        logger.info(
            "Loaded %s: %d sheets, %d rows", dataset.value, len(loaded), sum(len(r) for r in loaded.values())
        )
        return loaded

    def sheets(self, dataset: "Dataset | str") -> dict[str, list[Row]]:
        """
        Rows of every sheet, keyed by normalized sheet name.

        Raises:
            UnknownDatasetError: If the dataset name is invalid
            WorkbookError: If the workbook cannot be read
        """
        dataset = Dataset.parse(dataset)
        return self.cache.get_or_load(f"sheets:{dataset.value}", lambda: self._load_sheets(dataset))

    def rows(self, dataset: "Dataset | str") -> list[Row]:
        """All rows of a dataset across sheets, in workbook order."""
        dataset = Dataset.parse(dataset)

        def flatten() -> list[Row]:
            return [row for rows in self.sheets(dataset).values() for row in rows]

        return self.cache.get_or_load(f"rows:{dataset.value}", flatten)

    def sheet_info(self) -> dict[str, dict[str, Any]]:
        """Workbook file and sheet names per dataset; read failures are reported, not raised."""
        info: dict[str, dict[str, Any]] = {}
        for dataset in Dataset:
            path = self.workbook_path(dataset)
            try:
                info[dataset.value] = {"file": path.name, "sheets": self.sheet_names(dataset)}
            except WorkbookError as e:
                logger.warning("Could not list sheets of %s: %s", path.name, e)
                info[dataset.value] = {"file": path.name, "error": str(e)}
        return info

    def listing(
        self,
        dataset: "Dataset | str",
        period: Period,
        sheet: str | None = None,
        filters: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Raw rows of a dataset filtered to a period, grouped by sheet.

        Each sheet also gets a count/total/average/min/max summary of its
        amount column, computed over the rows returned.

        Args:
            dataset: Dataset to list
            period: Usually a single calendar month, or All Time
            sheet: Restrict to one sheet (normalized or display name)
            filters: Named field filters (see data.filters.LISTING_FILTERS)
        """
        dataset = Dataset.parse(dataset)
        sheets = self.sheets(dataset)
        if sheet is not None:
            wanted = sheet_key(sheet)
            sheets = {key: rows for key, rows in sheets.items() if key == wanted}

        filters = filters or {}
        data: dict[str, list[Row]] = {}
        for key, rows in sheets.items():
            in_period = filter_by_period(rows, period, date_fields_for(dataset, key))
            data[key] = apply_filters(dataset, key, in_period, filters)
        if filters:
            logger.debug("Listing %s with filters %s", dataset.value, filters)
        return {
            "dataset": dataset.value,
            "filter_period": period.label,
            "filters": dict(filters),
            "sheets": list(data),
            "total_records": sum(len(rows) for rows in data.values()),
            "summary": {key: amount_stats(rows, stat_fields_for(dataset, key)) for key, rows in data.items()},
            "data": data,
        }

    def all_datasets(self) -> dict[str, dict[str, list[Row]]]:
        """
        Every row of every dataset, keyed by dataset then normalized sheet name.

        Raises:
            WorkbookError: If any workbook cannot be read
        """
        return {dataset.value: self.sheets(dataset) for dataset in Dataset}

    def refresh(self) -> None:
        """Drop every cached dataset."""
        self.cache.clear()
        logger.info("Dataset cache cleared")
