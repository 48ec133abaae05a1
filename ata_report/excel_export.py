"""
Ata Report - Excel Exporter

Writes the filtered line items of an Ata report to a formatted workbook:
- Title band
- Contract metadata block (Número da Ata, Objeto, Negociação, Vigência)
- Item table with typed numeric columns and zebra stripes
- Generation timestamp footer
"""

import logging
import os
import re
import tempfile
from datetime import datetime
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .errors import EmptyResultError
from .models import ExtractionResult
from .numeric import is_numeric_column, normalize_numeric

logger = logging.getLogger(__name__)


DEFAULT_SHEET_TITLE = "Dados Filtrados"
REPORT_TITLE = "RELATÓRIO DE DADOS FILTRADOS"

# (label, ContractMetadata attribute), in display order
METADATA_LABELS = [
    ("Número da Ata", "numero_ata"),
    ("Objeto", "objeto"),
    ("Negociação", "negociacao"),
    ("Início Vigência", "inicio_vigencia"),
    ("Final Vigência", "final_vigencia"),
]

MISSING_VALUE = "-"
NUMBER_FORMAT = "#,##0.00"

# Title band and footer span at least A:F
MIN_SPAN_COLUMNS = 6
WIDE_VALUE_LENGTH = 50
MAX_COLUMN_WIDTH = 50
EMPTY_CELL_WIDTH = 10

_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


class ExcelExporter:
    """
    Export an ExtractionResult to a styled single-sheet workbook.

    Row layout:
        1                   title band
        3..7                metadata label/value pairs
        10                  table header
        11..                one row per record
        header + n + 3      "Gerado em" footer
    """

    COLORS = {
        "title": "D9D9D9",
        "label": "F2F2F2",
        "header": "1F4E78",
        "header_font": "FFFFFF",
        "stripe": "F9F9F9",
        "footer_font": "666666",
    }

    def __init__(self):
        thin = Side(style="thin")
        self.thin_border = Border(left=thin, right=thin, top=thin, bottom=thin)

    def _fill(self, color_key: str) -> PatternFill:
        color = self.COLORS[color_key]
        return PatternFill(start_color=color, end_color=color, fill_type="solid")

    def export(
        self,
        result: ExtractionResult,
        output_path: str,
        unit: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Build the workbook and write it to ``output_path``.

        The file is saved under a temporary name in the same directory and
        renamed into place, so ``output_path`` never holds a partial file.

        Raises:
            EmptyResultError: result has no records (nothing is written)
        """
        wb = self.build_workbook(result, unit, generated_at)

        directory = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(suffix=".xlsx.part", dir=directory)
        os.close(fd)
        try:
            wb.save(tmp_path)
            os.replace(tmp_path, output_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Exported {len(result.records)} records to {output_path}")
        return output_path

    def build_workbook(
        self,
        result: ExtractionResult,
        unit: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> Workbook:
        if not result.records:
            raise EmptyResultError(unit or "")

        wb = Workbook()
        ws = wb.active
        ws.title = sheet_title(unit)

        columns = result.columns
        span = max(MIN_SPAN_COLUMNS, len(columns))

        self._write_title(ws, span)
        self._write_metadata(ws, result, span)

        header_row = len(METADATA_LABELS) + 5
        self._write_table(ws, result, columns, header_row)

        footer_row = header_row + len(result.records) + 3
        self._write_footer(ws, footer_row, span, generated_at or datetime.now())

        self._fit_columns(ws)
        return wb

    def _write_title(self, ws: Worksheet, span: int):
        ws.merge_cells(f"A1:{get_column_letter(span)}1")
        cell = ws["A1"]
        cell.value = REPORT_TITLE
        cell.font = Font(bold=True, size=16)
        cell.alignment = Alignment(horizontal="center")
        cell.fill = self._fill("title")

    def _write_metadata(self, ws: Worksheet, result: ExtractionResult, span: int):
        for i, (label, attr) in enumerate(METADATA_LABELS):
            row = i + 3
            value = getattr(result.metadata, attr) or MISSING_VALUE

            label_cell = ws[f"A{row}"]
            label_cell.value = f"{label}:"
            label_cell.font = Font(bold=True)
            label_cell.fill = self._fill("label")
            label_cell.border = self.thin_border

            value_cell = ws[f"B{row}"]
            _set_value(value_cell, value)
            value_cell.border = self.thin_border

            # Long Objeto text gets the full width of the title band
            if label == "Objeto" and len(value) > WIDE_VALUE_LENGTH:
                ws.merge_cells(f"B{row}:{get_column_letter(span)}{row}")
            else:
                ws.merge_cells(f"B{row}:C{row}")

    def _write_table(self, ws: Worksheet, result: ExtractionResult,
                     columns: List[str], header_row: int):
        header_font = Font(bold=True, color=self.COLORS["header_font"])
        header_fill = self._fill("header")

        for col, name in enumerate(columns, 1):
            cell = ws.cell(row=header_row, column=col)
            _set_value(cell, name)
            cell.font = header_font
            cell.alignment = Alignment(vertical="center", horizontal="center")
            cell.fill = header_fill
            cell.border = self.thin_border

        stripe = self._fill("stripe")
        numeric = [is_numeric_column(name) for name in columns]

        # Stripe parity follows the record position in the whole result,
        # not the position inside a unit section
        for position, record in enumerate(result.records):
            row = header_row + position + 1
            for col, name in enumerate(columns, 1):
                cell = ws.cell(row=row, column=col)
                value = self._record_value(record, name)

                if numeric[col - 1]:
                    cell.value = normalize_numeric(value)
                    cell.alignment = Alignment(horizontal="right", vertical="center")
                    cell.number_format = NUMBER_FORMAT
                else:
                    _set_value(cell, value)
                    cell.alignment = Alignment(horizontal="left", vertical="center")

                cell.border = self.thin_border
                if position % 2 == 0:
                    cell.fill = stripe

    @staticmethod
    def _record_value(record, name: str) -> Any:
        value = record.get(name)
        return "" if value is None else value

    def _write_footer(self, ws: Worksheet, row: int, span: int, generated_at: datetime):
        ws.merge_cells(f"A{row}:{get_column_letter(span)}{row}")
        cell = ws[f"A{row}"]
        cell.value = f"Gerado em: {format_timestamp(generated_at)}"
        cell.font = Font(italic=True, color=self.COLORS["footer_font"])
        cell.alignment = Alignment(horizontal="right")

    def _fit_columns(self, ws: Worksheet):
        """width = min(longest text + 2, 50); empty cells count as 10"""
        for col_idx, cells in enumerate(
            ws.iter_cols(min_row=1, max_row=ws.max_row, max_col=ws.max_column), 1
        ):
            longest = 0
            for cell in cells:
                value = cell.value
                length = EMPTY_CELL_WIDTH if value is None or value == "" else len(str(value))
                longest = max(longest, length)
            ws.column_dimensions[get_column_letter(col_idx)].width = min(
                longest + 2, MAX_COLUMN_WIDTH
            )


def _set_value(cell, value: Any) -> None:
    """Store ``value`` as-is; text starting with "=" stays text, not a formula"""
    cell.value = value
    if isinstance(value, str):
        cell.data_type = "s"


def sheet_title(unit: Optional[str]) -> str:
    """Worksheet title for ``unit``, made valid for Excel"""
    title = _INVALID_TITLE_CHARS.sub("_", unit or "").strip()
    return title[:31] or DEFAULT_SHEET_TITLE


def format_timestamp(moment: datetime) -> str:
    """pt-BR style local timestamp, e.g. 19/10/2026 14:03:22"""
    return moment.strftime("%d/%m/%Y %H:%M:%S")


def export_to_excel(
    result: ExtractionResult,
    output_path: str,
    unit: Optional[str] = None,
) -> str:
    """
    Convenience function to export a scan result to Excel

    Args:
        result: ExtractionResult from the section scanner
        output_path: Path for output .xlsx file
        unit: Selected unit label (used as the sheet title)

    Returns:
        Path to created file
    """
    exporter = ExcelExporter()
    return exporter.export(result, output_path, unit)
