"""
Workbook Package

Loading of Excel workbooks into dict rows.
"""

from .loader import WorkbookError, list_sheets, read_rows, sheet_key

__all__ = ["WorkbookError", "list_sheets", "read_rows", "sheet_key"]
