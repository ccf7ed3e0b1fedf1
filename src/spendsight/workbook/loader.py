#!/usr/bin/env python3
"""
Excel Workbook Loader

Reads sheets of the (optionally password-protected) source workbooks into
lists of plain dict rows.

Functions:
- list_sheets: Sheet names of a workbook, in workbook order
- read_rows: Rows of one sheet as dictionaries with normalized headers
- sheet_key: Normalized sheet name used as a response key
"""

import io
import json
import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import IO, Any

import msoffcrypto
import numpy as np
import pandas as pd
from msoffcrypto.exceptions import DecryptionError, FileFormatError, InvalidKeyError

logger = logging.getLogger(__name__)

EXCEL_ERRORS = frozenset({"#N/A", "#REF!", "#VALUE!", "#DIV/0!", "#NAME?", "#NUM!", "#NULL!"})

_HEADER_SEPARATORS = re.compile(r"[\s/]+")

_READ_ERRORS = (
    OSError,
    ValueError,
    KeyError,
    zipfile.BadZipFile,
    FileFormatError,
    DecryptionError,
    InvalidKeyError,
)


class WorkbookError(OSError):
    """Raised when a workbook cannot be opened, decrypted or parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to read workbook {path.name}: {reason}")
        self.path = path


def sheet_key(name: str) -> str:
    """
    Response key for a sheet name.

    Example:
        sheet_key("Flyy points") -> "flyy_points"
    """
    return "_".join(name.strip().lower().split())


def normalize_header(header: Any) -> str:
    """Trim a column header and replace spaces/slashes with underscores."""
    return _HEADER_SEPARATORS.sub("_", str(header).strip())


def _open_source(path: Path, password: str | None) -> IO[bytes] | Path:
    """Decrypted in-memory copy of the workbook, or the path itself when not encrypted."""
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    if password is None:
        return path

    with open(path, "rb") as encrypted:
        office_file = msoffcrypto.OfficeFile(encrypted)
        if not office_file.is_encrypted():
            return path
        office_file.load_key(password=password)
        decrypted = io.BytesIO()
        office_file.decrypt(decrypted)

    decrypted.seek(0)
    return decrypted


def clean_cell(value: Any) -> Any:
    """
    Convert a raw cell into a plain Python value.

    - NaN/NaT -> None
    - Excel error literals -> {"_error": "#N/A"}
    - JSON object/array text -> decoded value
    - Timestamps -> naive datetime
    - numpy scalars -> Python scalars
    """
    if value is None:
        return None
    if isinstance(value, (list, dict)):
        return value
    if pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, str):
        text = value.strip()
        if text in EXCEL_ERRORS:
            return {"_error": text}
        if text[:1] in ("{", "["):
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                return value
    return value


def list_sheets(path: str | Path, password: str | None = None) -> list[str]:
    """
    Sheet names of a workbook in workbook order.

    Raises:
        WorkbookError: If the workbook cannot be opened or decrypted
    """
    path = Path(path)
    try:
        with pd.ExcelFile(_open_source(path, password), engine="openpyxl") as workbook:
            return [str(name) for name in workbook.sheet_names]
    except _READ_ERRORS as e:
        raise WorkbookError(path, str(e)) from e


def read_rows(path: str | Path, sheet_name: str | None = None, password: str | None = None) -> list[dict[str, Any]]:
    """
    Read one sheet into a list of row dictionaries.

    Args:
        path: Workbook file
        sheet_name: Sheet to read; the first sheet when None
        password: Workbook password, if the file is encrypted

    Returns:
        List of rows keyed by normalized header. Fully blank rows are dropped.

    Raises:
        WorkbookError: If the workbook or sheet cannot be read
    """
    path = Path(path)
    try:
        frame = pd.read_excel(
            _open_source(path, password),
            sheet_name=sheet_name if sheet_name is not None else 0,
            engine="openpyxl",
            dtype=object,
        )
    except _READ_ERRORS as e:
        raise WorkbookError(path, str(e)) from e

    frame = frame.dropna(how="all")
    headers = [normalize_header(column) for column in frame.columns]

    rows = [
        {header: clean_cell(value) for header, value in zip(headers, record, strict=True)}
        for record in frame.itertuples(index=False, name=None)
    ]
    logger.debug("Read %d rows from %s [%s]", len(rows), path.name, sheet_name or "first sheet")
    return rows
