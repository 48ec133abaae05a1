"""
Ata Report - Excel Reader

Loads the first worksheet of an Ata report (XLSX) into SpreadsheetRows and
runs the section scanner over it. Every call rereads the file; nothing is
cached between requests.
"""

import logging
import os
import zipfile
from typing import List

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .errors import SpreadsheetReadError
from .models import ALL_UNITS, ExtractionResult, SpreadsheetRow
from .section_scanner import find_unit_names, scan_rows

logger = logging.getLogger(__name__)


def load_rows(file_path: str) -> List[SpreadsheetRow]:
    """
    Read every row of the first sheet.

    Returns:
        Rows in document order, 1-based, with raw cell values

    Raises:
        SpreadsheetReadError: file missing, not a workbook, or has no sheets
    """
    if not os.path.exists(file_path):
        raise SpreadsheetReadError(file_path, "file not found")

    try:
        wb = openpyxl.load_workbook(file_path, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        raise SpreadsheetReadError(file_path, str(exc)) from exc

    try:
        if not wb.worksheets:
            raise SpreadsheetReadError(file_path, "workbook has no sheets")
        ws = wb.worksheets[0]
        rows = [
            SpreadsheetRow(index=idx, values=tuple(values))
            for idx, values in enumerate(ws.iter_rows(values_only=True), start=1)
        ]
    finally:
        wb.close()

    logger.debug(f"Loaded {len(rows)} rows from sheet '{ws.title}' of {os.path.basename(file_path)}")
    return rows


def list_units(file_path: str) -> List[str]:
    """Sorted unit labels ("SESC - ...") present in the document"""
    return find_unit_names(load_rows(file_path))


def extract(file_path: str, unit: str = ALL_UNITS) -> ExtractionResult:
    """Read ``file_path`` and extract metadata plus the records of ``unit``"""
    return scan_rows(load_rows(file_path), unit or ALL_UNITS)
