"""
Data Access Package

Cached access to the four source datasets.
"""

from .service import DataService, Dataset, UnknownDatasetError

__all__ = ["DataService", "Dataset", "UnknownDatasetError"]
