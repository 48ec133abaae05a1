"""
Ata Report - framework-agreement report filter

Turns the semi-structured "Ata" procurement spreadsheet (one subsection per
SESC unit, free-text contract metadata in the preamble) into a normalized
list of line items and a formatted Excel report for a chosen unit.
"""

__version__ = "1.0.0"

from .errors import AtaReportError, EmptyResultError, SpreadsheetReadError
from .models import (
    ALL_UNITS,
    UNIT_SENTINEL,
    ContractMetadata,
    ExtractionResult,
    Record,
    ScanPhase,
    ScanState,
    SpreadsheetRow,
)
from .metadata_extractor import METADATA_RULES, MetadataExtractor, MetadataRule
from .section_scanner import (
    HeaderDetector,
    RecordBuilder,
    RowKind,
    SectionScanner,
    UnitSectionDetector,
    find_unit_names,
    scan_rows,
)
from .numeric import NUMERIC_COLUMNS, is_numeric_column, normalize_numeric
from .excel_parser import extract, list_units, load_rows
from .excel_export import ExcelExporter, export_to_excel

__all__ = [
    "AtaReportError",
    "EmptyResultError",
    "SpreadsheetReadError",
    "ALL_UNITS",
    "UNIT_SENTINEL",
    "ContractMetadata",
    "ExtractionResult",
    "Record",
    "ScanPhase",
    "ScanState",
    "SpreadsheetRow",
    "METADATA_RULES",
    "MetadataExtractor",
    "MetadataRule",
    "HeaderDetector",
    "RecordBuilder",
    "RowKind",
    "SectionScanner",
    "UnitSectionDetector",
    "find_unit_names",
    "scan_rows",
    "NUMERIC_COLUMNS",
    "is_numeric_column",
    "normalize_numeric",
    "extract",
    "list_units",
    "load_rows",
    "ExcelExporter",
    "export_to_excel",
]
