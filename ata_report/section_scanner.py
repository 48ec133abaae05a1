"""
Ata Report - Unit Section Scanner

Single-pass classification of report rows into structured records.

An Ata report repeats one subsection per organizational unit:

    SESC - Unidade A                      <- sentinel row
    Código | Descrição | Valor | ...      <- header row
    001    | Caneta    | 1,50  | ...      <- data rows
    Total  |           | 1,50             <- footer (skipped)
    SESC - Unidade B
    ...

Per row, in this order:
1. rows 1-20 feed the metadata extractor (never consumes the row)
2. a sentinel row switches capture on/off and resets the header
3. while capturing without a header, a header row is captured
4. while capturing with a header, the row becomes a record unless it is
   blank or a footer
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional

from .metadata_extractor import MetadataExtractor
from .models import (
    ALL_UNITS,
    UNIT_SENTINEL,
    ExtractionResult,
    Record,
    ScanPhase,
    ScanState,
    SpreadsheetRow,
    is_blank,
)

logger = logging.getLogger(__name__)


HEADER_KEYWORDS = ("descrição", "item", "código")
FOOTER_KEYWORDS = ("itens por unidade", "total", "observações", "subtotal")


class RowKind(Enum):
    """Classification of a row inside a captured section"""
    BLANK = "blank"
    FOOTER = "footer"
    DATA = "data"


def unit_display_name(sentinel: str) -> str:
    """'SESC - Unidade A' -> 'Unidade A'"""
    text = sentinel.strip()
    if text.startswith(UNIT_SENTINEL):
        return text[len(UNIT_SENTINEL):].strip()
    return text


class UnitSectionDetector:
    """Finds sentinel rows and decides whether their section is selected"""

    def find_sentinel(self, row: SpreadsheetRow) -> Optional[str]:
        """Trimmed text of the first sentinel cell in ``row``, if any"""
        for value in row.values:
            if isinstance(value, str) and value.strip().startswith(UNIT_SENTINEL):
                return value.strip()
        return None

    def is_selected(self, sentinel: str, selected_unit: str) -> bool:
        # A unit may be chosen by its full label or by its display name
        if selected_unit == ALL_UNITS:
            return True
        return selected_unit in (sentinel, unit_display_name(sentinel))

    def enter_section(self, state: ScanState, sentinel: str) -> None:
        state.capturing = self.is_selected(sentinel, state.selected_unit)
        state.header_found = False
        state.header = []


class HeaderDetector:
    """Recognizes the column-header row of a section by keyword"""

    def __init__(self, keywords: Iterable[str] = HEADER_KEYWORDS):
        self.keywords = tuple(k.lower() for k in keywords)

    def is_header(self, row: SpreadsheetRow) -> bool:
        for value in row.values:
            if not isinstance(value, str):
                continue
            lowered = value.lower()
            if any(k in lowered for k in self.keywords):
                return True
        return False

    def capture(self, state: ScanState, row: SpreadsheetRow) -> None:
        state.header = [self._column_name(v) for v in row.values]
        state.header_found = True

    @staticmethod
    def _column_name(value) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class RecordBuilder:
    """Turns data rows into records keyed by the captured header"""

    def __init__(self, footer_keywords: Iterable[str] = FOOTER_KEYWORDS):
        self.footer_keywords = tuple(k.lower() for k in footer_keywords)

    def classify(self, row: SpreadsheetRow) -> RowKind:
        if row.is_blank():
            return RowKind.BLANK
        line = row.line_text.lower()
        if any(k in line for k in self.footer_keywords):
            return RowKind.FOOTER
        return RowKind.DATA

    def build(self, header: List[str], row: SpreadsheetRow) -> Optional[Record]:
        """
        Map ``row`` onto ``header``; None when every mapped value is empty.

        Columns with an empty name are dropped. Missing cells map to "".
        Zero and other falsy numbers are kept as-is.
        """
        record: Record = {}
        for idx, name in enumerate(header):
            if not name:
                continue
            value = row.values[idx] if idx < len(row.values) else None
            record[name] = "" if value is None else value

        if all(v == "" for v in record.values()):
            return None
        return record


class SectionScanner:
    """
    Runs the combined per-row precedence over a document's rows.

    Each call to ``scan`` creates its own ScanState and ExtractionResult,
    so a scanner instance can be reused across documents and requests.
    """

    def __init__(
        self,
        metadata_extractor: Optional[MetadataExtractor] = None,
        unit_detector: Optional[UnitSectionDetector] = None,
        header_detector: Optional[HeaderDetector] = None,
        record_builder: Optional[RecordBuilder] = None,
    ):
        self.metadata_extractor = metadata_extractor or MetadataExtractor()
        self.unit_detector = unit_detector or UnitSectionDetector()
        self.header_detector = header_detector or HeaderDetector()
        self.record_builder = record_builder or RecordBuilder()

    def scan(self, rows: Iterable[SpreadsheetRow],
             selected_unit: str = ALL_UNITS) -> ExtractionResult:
        state = ScanState(selected_unit=selected_unit)
        result = ExtractionResult()

        for row in rows:
            self.process_row(row, state, result)

        logger.info(
            f"Scan complete for '{selected_unit}': {len(result.records)} records"
        )
        if not result.metadata.is_complete():
            missing = [f for f in result.metadata.FIELDS if not result.metadata.is_set(f)]
            logger.info(f"Contract metadata not found: {', '.join(missing)}")
        return result

    def process_row(self, row: SpreadsheetRow, state: ScanState,
                    result: ExtractionResult) -> None:
        self.metadata_extractor.feed(row, result.metadata)

        sentinel = self.unit_detector.find_sentinel(row)
        if sentinel is not None:
            self.unit_detector.enter_section(state, sentinel)
            logger.debug(
                f"Row {row.index}: section '{sentinel}' "
                f"({'capturing' if state.capturing else 'skipped'})"
            )
            return

        phase = state.phase
        if phase is ScanPhase.AWAITING_HEADER:
            if self.header_detector.is_header(row):
                self.header_detector.capture(state, row)
                logger.debug(f"Row {row.index}: header {state.header}")
            return

        if phase is ScanPhase.CAPTURING:
            if self.record_builder.classify(row) is not RowKind.DATA:
                return
            record = self.record_builder.build(state.header, row)
            if record is not None:
                result.records.append(record)


def scan_rows(rows: Iterable[SpreadsheetRow],
              selected_unit: str = ALL_UNITS) -> ExtractionResult:
    """Extract metadata and records for ``selected_unit`` from ``rows``"""
    return SectionScanner().scan(rows, selected_unit)


def find_unit_names(rows: Iterable[SpreadsheetRow]) -> List[str]:
    """Distinct trimmed sentinel labels found in any cell, sorted"""
    units = set()
    for row in rows:
        for value in row.values:
            if isinstance(value, str) and value.strip().startswith(UNIT_SENTINEL):
                units.add(value.strip())
    return sorted(units)
