#!/usr/bin/env python3
"""
Dataset Names

The four source workbooks and the date columns that place their rows.
"""

from collections.abc import Sequence
from enum import Enum

from ..core.records import (
    POINTS_DATE_FIELDS,
    REMITTANCE_DATE_FIELDS,
    REWARDS_DATE_FIELDS,
    TRAVEL_DATE_FIELDS,
    TXN_DATE_FIELDS,
)


class Dataset(Enum):
    """The source workbooks."""

    REMITTANCE = "remittance"
    TRANSACTIONS = "transactions"
    REWARDS = "rewards"
    TRAVELBUDDY = "travelbuddy"

    @classmethod
    def parse(cls, name: "str | Dataset") -> "Dataset":
        """
        Dataset for a name, case-insensitive.

        Raises:
            UnknownDatasetError: If the name is not a dataset
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnknownDatasetError(str(name)) from None


class UnknownDatasetError(KeyError):
    """Raised for a dataset name outside the Dataset enum."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        valid = ", ".join(d.value for d in Dataset)
        return f"Unknown dataset: {self.name} (expected one of: {valid})"


def date_fields_for(dataset: Dataset, key: str = "") -> Sequence[str]:
    """Date columns used to place a dataset's rows (rewards varies by sheet)."""
    if dataset == Dataset.TRANSACTIONS:
        return TXN_DATE_FIELDS
    if dataset == Dataset.TRAVELBUDDY:
        return TRAVEL_DATE_FIELDS
    if dataset == Dataset.REMITTANCE:
        return REMITTANCE_DATE_FIELDS
    return POINTS_DATE_FIELDS if "flyy" in key or "points" in key else REWARDS_DATE_FIELDS
